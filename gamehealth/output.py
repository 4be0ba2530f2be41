"""Output formatting for gamehealth."""

from collections import defaultdict

from gamehealth.health import calculate_overall_health_score, health_rating
from gamehealth.models import Assignment, GameData, PlayerProblem, PreferenceStatus
from gamehealth.preferences import PreferenceModel

PREFERENCE_DISPLAY: dict[PreferenceStatus | None, str] = {
    PreferenceStatus.LOVE: "Love",
    PreferenceStatus.PRACTICE: "Practice",
    PreferenceStatus.NEUTRAL: "Neutral",
    PreferenceStatus.DISLIKE: "Dislike",
    None: "No preference",
}


def format_health_report(
    data: GameData,
    player_problems: list[PlayerProblem],
    suggestions: list[str],
) -> str:
    """Format a health analysis for display."""
    score = calculate_overall_health_score(player_problems)
    lines: list[str] = [
        "=== Game Assignment Health ===",
        f"Health score: {score}/100",
        health_rating(score).value,
        "",
    ]

    if suggestions:
        lines.append("=== Suggested Improvements ===")
        for suggestion in suggestions:
            lines.append(f"  - {suggestion}")
        lines.append("")

    walk_ins = {p.user_id for p in data.players if p.is_walk_in}
    registered = [p for p in player_problems if p.user_id not in walk_ins]
    walk_in_results = [p for p in player_problems if p.user_id in walk_ins]

    lines.append("=== Player Analysis ===")
    if not player_problems:
        lines.append("No attending players.")
    for title, group in (("Registered players", registered), ("Walk-in players", walk_in_results)):
        if not group:
            continue
        lines.append(f"--- {title} ({len(group)}) ---")
        for player in group:
            lines.append(f"  {player.player_name} (happiness {player.happiness_score:+d})")
            if not player.problems:
                lines.append("    no problems")
            for problem in player.problems:
                lines.append(f"    [{problem.severity.value}] {problem.description}")

    return "\n".join(lines)


def format_assignments(data: GameData, assignments: list[Assignment]) -> str:
    """Format an assignment set grouped by game, in display order."""
    prefs = PreferenceModel(data.preferences)
    by_game: dict[str, list[Assignment]] = defaultdict(list)
    for assignment in assignments:
        by_game[assignment.game_id].append(assignment)

    lines: list[str] = ["=== Game Assignments ==="]
    for game in data.games_in_order():
        members = by_game.get(game.id, [])
        lines.append(
            f"  {game.name} ({len(members)} players, needs {game.min_players}-{game.max_players}):"
        )
        for assignment in members:
            label = PREFERENCE_DISPLAY[prefs.status_for(assignment.user_id, game.id)]
            lines.append(f"    - {assignment.name or assignment.user_id} ({label})")
    return "\n".join(lines)


def format_assignments_csv(assignments: list[Assignment]) -> str:
    """Format assignments as CSV for export."""
    lines: list[str] = ["event_id,game_id,user_id,name"]
    for a in assignments:
        lines.append(f"{a.event_id},{a.game_id},{a.user_id},{a.name}")
    return "\n".join(lines)
