"""Health analysis and optimization of player-to-game assignments for improv events."""

__version__ = "0.1.0"

from gamehealth.health import analyze_game_health, calculate_overall_health_score
from gamehealth.optimizer import auto_assign_players
from gamehealth.suggestions import get_improved_assignment_suggestions

__all__ = [
    "analyze_game_health",
    "auto_assign_players",
    "calculate_overall_health_score",
    "get_improved_assignment_suggestions",
]
