"""YAML parsing and writing of event snapshots for gamehealth."""

from pathlib import Path
from typing import Any

import yaml

from gamehealth.models import (
    Assignment,
    AttendanceStatus,
    Game,
    GameData,
    Player,
    Preference,
    PreferenceStatus,
)

# Preference labels as stored by the group app, plus the enum's own names
PREFERENCE_LABELS: dict[str, PreferenceStatus] = {
    "i love playing this": PreferenceStatus.LOVE,
    "i need to practice this": PreferenceStatus.PRACTICE,
    "neutral": PreferenceStatus.NEUTRAL,
    "i dont like this game": PreferenceStatus.DISLIKE,
    "i don't like this game": PreferenceStatus.DISLIKE,
    **{status.value: status for status in PreferenceStatus},
}


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be turned into GameData."""


def _get(entry: dict[str, Any], snake: str, camel: str | None = None, default: Any = ...) -> Any:
    """Read a key in snake_case or the API's camelCase spelling."""
    if snake in entry:
        return entry[snake]
    if camel is not None and camel in entry:
        return entry[camel]
    if default is ...:
        raise KeyError(snake)
    return default


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise SnapshotError(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except ValueError as e:
        raise SnapshotError(f"{what} must be an integer, got {value!r}") from e


def parse_preference_status(label: str) -> PreferenceStatus:
    """Map a stored preference label (case-insensitive) to a PreferenceStatus."""
    status = PREFERENCE_LABELS.get(str(label).strip().lower())
    if status is None:
        raise SnapshotError(f"Unknown preference status: {label!r}")
    return status


def parse_attendance_status(label: str) -> AttendanceStatus:
    try:
        return AttendanceStatus(str(label).strip().lower())
    except ValueError as e:
        raise SnapshotError(f"Unknown attendance status: {label!r}") from e


def _parse_game(entry: dict[str, Any]) -> Game:
    game_id = str(_get(entry, "id"))
    min_players = _as_int(_get(entry, "min_players", "minPlayers"), f"game {game_id} min_players")
    max_players = _as_int(_get(entry, "max_players", "maxPlayers"), f"game {game_id} max_players")
    if min_players < 1:
        raise SnapshotError(f"game {game_id}: min_players must be at least 1")
    if min_players > max_players:
        raise SnapshotError(
            f"game {game_id}: min_players ({min_players}) exceeds max_players ({max_players})"
        )
    return Game(
        id=game_id,
        name=str(_get(entry, "name", default=game_id)),
        min_players=min_players,
        max_players=max_players,
        order_index=_as_int(_get(entry, "order_index", "orderIndex", default=0), "order_index"),
        description=str(_get(entry, "description", default="") or ""),
        tags=[str(t) for t in _get(entry, "tags", default=[]) or []],
    )


def _parse_player(entry: dict[str, Any]) -> Player:
    return Player(
        user_id=str(_get(entry, "user_id", "userId")),
        first_name=str(_get(entry, "first_name", "firstName", default="") or ""),
        last_name=str(_get(entry, "last_name", "lastName", default="") or ""),
        status=parse_attendance_status(_get(entry, "status", default="attending")),
        is_walk_in=bool(_get(entry, "is_walk_in", "isWalkIn", default=False)),
    )


def _parse_assignment(entry: dict[str, Any]) -> Assignment:
    return Assignment(
        user_id=str(_get(entry, "user_id", "userId")),
        game_id=str(_get(entry, "game_id", "gameId")),
        event_id=str(_get(entry, "event_id", "eventId", default="") or ""),
        name=str(_get(entry, "name", default="") or ""),
    )


def _parse_preference(entry: dict[str, Any]) -> Preference:
    return Preference(
        user_id=str(_get(entry, "user_id", "userId")),
        game_id=str(_get(entry, "game_id", "gameId")),
        status=parse_preference_status(_get(entry, "status")),
    )


_SECTIONS = (
    ("games", _parse_game),
    ("players", _parse_player),
    ("assignments", _parse_assignment),
    ("preferences", _parse_preference),
)


def parse_game_data(data: dict[str, Any]) -> GameData:
    """
    Build a GameData snapshot from already-decoded YAML or JSON.

    Raises SnapshotError naming the section and entry index on malformed input.
    """
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a mapping with games, players, assignments, preferences")

    sections: dict[str, list] = {}
    for section, parse_entry in _SECTIONS:
        entries = data.get(section) or []
        if not isinstance(entries, list):
            raise SnapshotError(f"'{section}' must be a list")
        parsed = []
        for idx, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise SnapshotError(f"{section}[{idx}] must be a mapping")
            try:
                parsed.append(parse_entry(entry))
            except KeyError as e:
                raise SnapshotError(f"{section}[{idx}] is missing required key {e}") from e
            except SnapshotError as e:
                raise SnapshotError(f"{section}[{idx}]: {e}") from e
        sections[section] = parsed

    return GameData(
        games=sections["games"],
        players=sections["players"],
        assignments=sections["assignments"],
        preferences=sections["preferences"],
        event_id=str(_get(data, "event_id", "eventId", default="") or ""),
    )


def load_game_data(path: Path) -> GameData:
    """Load a snapshot from a YAML (or JSON) file."""
    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SnapshotError(f"Invalid YAML: {e}") from e
    return parse_game_data(data or {})


def write_assignments_yaml(output_path: Path, assignments: list[Assignment], event_id: str = ""):
    """Write an assignment set in the shape expected by the set-assignments call."""
    document = {
        "event_id": event_id,
        "assignments": [
            {
                "user_id": a.user_id,
                "game_id": a.game_id,
                "event_id": a.event_id or event_id,
                "name": a.name,
            }
            for a in assignments
        ],
    }
    with output_path.open("w", encoding="utf-8") as f:
        yaml.dump(document, f, default_flow_style=False, sort_keys=False)
