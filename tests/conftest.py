"""Shared test fixtures."""

import pytest

from gamehealth.models import (
    Assignment,
    Game,
    GameData,
    Player,
    Preference,
    PreferenceStatus,
)

LOVE = PreferenceStatus.LOVE
PRACTICE = PreferenceStatus.PRACTICE
DISLIKE = PreferenceStatus.DISLIKE


def _assign(user_id: str, game_id: str, name: str = "") -> Assignment:
    """Create an Assignment for event1."""
    return Assignment(user_id=user_id, game_id=game_id, event_id="event1", name=name)


@pytest.fixture
def games() -> list[Game]:
    return [
        Game(id="1", name="Game 1", min_players=2, max_players=4, order_index=0, tags=["tag1"]),
        Game(id="2", name="Game 2", min_players=3, max_players=6, order_index=1, tags=["tag2"]),
        Game(id="3", name="Game 3", min_players=2, max_players=5, order_index=2),
    ]


@pytest.fixture
def players() -> list[Player]:
    return [
        Player(user_id="user1", first_name="John", last_name="Doe"),
        Player(user_id="user2", first_name="Jane", last_name="Smith"),
        Player(user_id="user3", first_name="Bob", last_name="Johnson"),
    ]


@pytest.fixture
def preferences() -> list[Preference]:
    return [
        Preference("user1", "1", LOVE),
        Preference("user1", "3", LOVE),
        Preference("user2", "2", PRACTICE),
        Preference("user2", "3", DISLIKE),
        Preference("user3", "1", LOVE),
    ]


@pytest.fixture
def game_data(games, players, preferences) -> GameData:
    """Three games, three attending players, four assignments."""
    return GameData(
        games=games,
        players=players,
        assignments=[
            _assign("user1", "1", "John Doe"),
            _assign("user1", "2", "John Doe"),
            _assign("user2", "2", "Jane Smith"),
            _assign("user3", "3", "Bob Johnson"),
        ],
        preferences=preferences,
        event_id="event1",
    )
