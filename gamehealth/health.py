"""Health analysis and scoring of game assignments."""

import math
from collections import defaultdict
from enum import Enum

from gamehealth.models import (
    GameData,
    PlayerProblem,
    PreferenceStatus,
    Problem,
    ProblemKind,
    Severity,
)
from gamehealth.preferences import PreferenceModel

# A player is out of balance once they are this far from the average count
BALANCE_TOLERANCE = 0.5
HIGH_GAP = 1.5
MEDIUM_GAP = 0.75

TOO_FEW_WEIGHT = 10
TOO_MANY_WEIGHT = 5  # over-participation is the lesser harm
DISLIKED_GAME_SCORE = -20
MISSING_LOVED_GAME_SCORE = -10

BASELINE_SCORE = 70  # no preference data and no imbalance
HAPPINESS_WEIGHT = 3


class HealthRating(Enum):
    """Coarse rating of an overall health score."""

    GOOD = "Game assignments are well balanced and players are generally satisfied."
    FAIR = "Game assignments have some issues that could be improved."
    POOR = "Game assignments have significant issues that should be addressed."


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def gap_severity(gap: float) -> Severity:
    if gap > HIGH_GAP:
        return Severity.HIGH
    if gap > MEDIUM_GAP:
        return Severity.MEDIUM
    return Severity.LOW


def analyze_game_health(data: GameData) -> list[PlayerProblem]:
    """
    Analyze assignments and preferences to find problems for each player.

    Returns one PlayerProblem per attending player, in snapshot order.
    References to unknown games degrade to a score of 0 and the raw game id.
    """
    players = data.attending_players()
    prefs = PreferenceModel(data.preferences)
    game_names = {g.id: g.name for g in data.games}

    assignments_by_player: dict[str, list[str]] = defaultdict(list)
    for assignment in data.assignments:
        assignments_by_player[assignment.user_id].append(assignment.game_id)

    counts = {p.user_id: len(assignments_by_player.get(p.user_id, [])) for p in players}
    average = sum(counts.values()) / max(1, len(counts))

    results: list[PlayerProblem] = []
    for player in players:
        problems: list[Problem] = []
        happiness = 0
        assigned = assignments_by_player.get(player.user_id, [])
        count = counts[player.user_id]
        gap = abs(count - average)

        if count < average - BALANCE_TOLERANCE:
            problems.append(
                Problem(
                    kind=ProblemKind.TOO_FEW_GAMES,
                    severity=gap_severity(gap),
                    description=(
                        f"Assigned to {count} games, which is below the average of {average:.1f}"
                    ),
                    score=-round_half_up(gap * TOO_FEW_WEIGHT),
                )
            )
        elif count > average + BALANCE_TOLERANCE:
            problems.append(
                Problem(
                    kind=ProblemKind.TOO_MANY_GAMES,
                    severity=gap_severity(gap),
                    description=(
                        f"Assigned to {count} games, which is above the average of {average:.1f}"
                    ),
                    score=-round_half_up(gap * TOO_MANY_WEIGHT),
                )
            )

        for game_id in assigned:
            happiness += prefs.score_for(player.user_id, game_id)
            if prefs.status_for(player.user_id, game_id) is PreferenceStatus.DISLIKE:
                problems.append(
                    Problem(
                        kind=ProblemKind.DISLIKED_GAME,
                        severity=Severity.HIGH,
                        description=(
                            f"Assigned to a disliked game: {game_names.get(game_id, game_id)}"
                        ),
                        score=DISLIKED_GAME_SCORE,
                        game_id=game_id,
                    )
                )

        assigned_ids = set(assigned)
        missing = [g for g in prefs.loved_games(player.user_id) if g not in assigned_ids]
        if missing:
            names = ", ".join(game_names.get(g, g) for g in missing)
            problems.append(
                Problem(
                    kind=ProblemKind.UNBALANCED_ASSIGNMENTS,
                    severity=Severity.HIGH if len(missing) > 1 else Severity.MEDIUM,
                    description=f"Not assigned to {len(missing)} loved game(s): {names}",
                    score=MISSING_LOVED_GAME_SCORE * len(missing),
                )
            )

        results.append(
            PlayerProblem(
                user_id=player.user_id,
                player_name=player.display_name,
                problems=problems,
                happiness_score=happiness,
            )
        )

    return results


def raw_health_score(player_problems: list[PlayerProblem]) -> int:
    """Unclamped health score: baseline plus weighted happiness plus problem scores."""
    total_problem_score = sum(p.score for player in player_problems for p in player.problems)
    total_happiness = sum(player.happiness_score for player in player_problems)
    return BASELINE_SCORE + total_happiness * HAPPINESS_WEIGHT + total_problem_score


def calculate_overall_health_score(player_problems: list[PlayerProblem]) -> int:
    """
    Reduce a health analysis to a single score between 0 and 100.

    An empty analysis is vacuously healthy and scores 100.
    """
    if not player_problems:
        return 100
    return max(0, min(100, raw_health_score(player_problems)))


def health_rating(score: int) -> HealthRating:
    if score >= 80:
        return HealthRating.GOOD
    if score >= 60:
        return HealthRating.FAIR
    return HealthRating.POOR
