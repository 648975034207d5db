"""Achievement ladder: progress math, tracks, ordering and persisted state."""

from .engine import (
    SortedAchievements,
    build_unlocked_achievements_for_game,
    build_unlocked_achievements_for_track,
    next_achievements,
    sort_unlocked_achievements,
)
from .levels import default_achievement_levels
from .types import Achievement, AchievementCompletion, AchievementItem, AchievementTrack

__all__ = [
    "Achievement",
    "AchievementCompletion",
    "AchievementItem",
    "AchievementTrack",
    "SortedAchievements",
    "build_unlocked_achievements_for_game",
    "build_unlocked_achievements_for_track",
    "default_achievement_levels",
    "next_achievements",
    "sort_unlocked_achievements",
]
