"""Human-readable suggestions for improving game assignments."""

from collections import Counter

from gamehealth.models import GameData, PlayerProblem, ProblemKind


def get_improved_assignment_suggestions(
    data: GameData,
    player_problems: list[PlayerProblem],
) -> list[str]:
    """
    Suggest changes that would fix the problems found by the health analysis.

    Suggestions come in a fixed order: players with too few games, disliked
    games, missing loved games, then games outside their player bounds.
    """
    suggestions: list[str] = []
    game_names = {g.id: g.name for g in data.games}

    for player in player_problems:
        if player.has_problem(ProblemKind.TOO_FEW_GAMES):
            suggestions.append(
                f"Consider adding {player.player_name} to more games to balance participation."
            )

    for player in player_problems:
        for problem in player.problems_of(ProblemKind.DISLIKED_GAME):
            game_name = game_names.get(problem.game_id, problem.game_id)
            suggestions.append(
                f'Consider removing {player.player_name} from "{game_name}" which they dislike.'
            )

    for player in player_problems:
        if player.has_problem(ProblemKind.UNBALANCED_ASSIGNMENTS):
            suggestions.append(
                f"Consider adding {player.player_name} to games they love but aren't assigned to."
            )

    # Every assignment counts here, even for players outside the analysis
    game_counts = Counter(a.game_id for a in data.assignments)
    for game in data.games_in_order():
        count = game_counts.get(game.id, 0)
        if count < game.min_players:
            suggestions.append(
                f'"{game.name}" needs at least {game.min_players - count} more player(s) '
                "to meet minimum requirements."
            )
        elif count > game.max_players:
            suggestions.append(
                f'"{game.name}" has {count - game.max_players} too many player(s) '
                "exceeding maximum capacity."
            )

    return suggestions
