"""Per-game entry builders and achievement sets."""

from .registry import (
    GAMES,
    GameAchievementSummary,
    GameDefinition,
    compute_all_game_achievement_summaries,
    compute_game_achievements,
    flatten_summaries,
    get_game_entries,
)

__all__ = [
    "GAMES",
    "GameAchievementSummary",
    "GameDefinition",
    "compute_all_game_achievement_summaries",
    "compute_game_achievements",
    "flatten_summaries",
    "get_game_entries",
]
