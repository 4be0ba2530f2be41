"""Data models for gamehealth."""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum


class AttendanceStatus(Enum):
    """A player's RSVP for an event."""

    ATTENDING = "attending"
    MAYBE = "maybe"
    DECLINED = "declined"


class PreferenceStatus(Enum):
    """How a player feels about a game."""

    LOVE = "love"
    PRACTICE = "practice"  # needs to practice
    NEUTRAL = "neutral"
    DISLIKE = "dislike"


class ProblemKind(Enum):
    """Kinds of problems the health analysis reports."""

    TOO_FEW_GAMES = "too-few-games"
    TOO_MANY_GAMES = "too-many-games"
    DISLIKED_GAME = "disliked-game"
    UNBALANCED_ASSIGNMENTS = "unbalanced-assignments"


class Severity(Enum):
    """Problem severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class Game:
    """A game in the group's catalog."""

    id: str
    name: str
    min_players: int
    max_players: int
    order_index: int = 0
    description: str = ""
    tags: list[str] = field(default_factory=list)


@dataclass
class Player:
    """A player's RSVP record for the event."""

    user_id: str
    first_name: str = ""
    last_name: str = ""
    status: AttendanceStatus = AttendanceStatus.ATTENDING
    is_walk_in: bool = False  # no account, so no preference history

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.user_id

    @property
    def is_attending(self) -> bool:
        return self.status is AttendanceStatus.ATTENDING


@dataclass
class Assignment:
    """A player assigned to a game at an event."""

    user_id: str
    game_id: str
    event_id: str = ""
    name: str = ""  # denormalized display name


@dataclass
class Preference:
    """A player's stated preference for a game."""

    user_id: str
    game_id: str
    status: PreferenceStatus


@dataclass
class Problem:
    """A single diagnosed problem with a player's assignments."""

    kind: ProblemKind
    severity: Severity
    description: str
    score: int  # signed contribution to the health score
    game_id: str | None = None


@dataclass
class PlayerProblem:
    """Health analysis result for one player."""

    user_id: str
    player_name: str
    problems: list[Problem] = field(default_factory=list)
    happiness_score: int = 0

    def has_problem(self, kind: ProblemKind) -> bool:
        return any(p.kind is kind for p in self.problems)

    def problems_of(self, kind: ProblemKind) -> list[Problem]:
        return [p for p in self.problems if p.kind is kind]


@dataclass
class GameData:
    """Snapshot of one event: games, players, assignments and preferences."""

    games: list[Game] = field(default_factory=list)
    players: list[Player] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)
    preferences: list[Preference] = field(default_factory=list)
    event_id: str = ""

    def attending_players(self) -> list[Player]:
        return [p for p in self.players if p.is_attending]

    def games_in_order(self) -> list[Game]:
        """Games sorted by display order (stable for equal indices)."""
        return sorted(self.games, key=lambda g: g.order_index)

    def with_assignments(self, assignments: list[Assignment]) -> "GameData":
        """Return a copy of this snapshot with a different assignment set."""
        return dataclasses.replace(self, assignments=list(assignments))
