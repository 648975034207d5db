"""Registry of supported games keyed by game id."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from playladder.achievements.types import Achievement
from playladder.plays import Play

from . import (
    bullet,
    death_may_die,
    final_girl,
    mage_knight,
    mistfall,
    skytear_horde,
    spirit_island,
    too_many_bones,
    unsettled,
)


@dataclass(frozen=True)
class GameDefinition:
    game_id: str
    name: str
    content_id: str
    object_ids: tuple[str, ...]
    entries: Callable[[Sequence[Play], str], list]
    achievements: Callable[[Sequence[Play], str], list[Achievement]]
    entry_columns: tuple[str, ...]


@dataclass
class GameAchievementSummary:
    game_id: str
    game_name: str
    achievements: list[Achievement]


GAMES: dict[str, GameDefinition] = {
    final_girl.GAME_ID: GameDefinition(
        game_id=final_girl.GAME_ID,
        name=final_girl.GAME_NAME,
        content_id=final_girl.CONTENT_ID,
        object_ids=final_girl.OBJECT_IDS,
        entries=final_girl.get_final_girl_entries,
        achievements=final_girl.compute_final_girl_achievements,
        entry_columns=("villain", "location", "final_girl"),
    ),
    death_may_die.GAME_ID: GameDefinition(
        game_id=death_may_die.GAME_ID,
        name=death_may_die.GAME_NAME,
        content_id=death_may_die.CONTENT_ID,
        object_ids=death_may_die.OBJECT_IDS,
        entries=death_may_die.get_death_may_die_entries,
        achievements=death_may_die.compute_death_may_die_achievements,
        entry_columns=("elder_one", "scenario", "my_investigator", "investigators"),
    ),
    mage_knight.GAME_ID: GameDefinition(
        game_id=mage_knight.GAME_ID,
        name=mage_knight.GAME_NAME,
        content_id=mage_knight.CONTENT_ID,
        object_ids=mage_knight.OBJECT_IDS,
        entries=mage_knight.get_mage_knight_entries,
        achievements=mage_knight.compute_mage_knight_achievements,
        entry_columns=("my_hero", "heroes"),
    ),
    spirit_island.GAME_ID: GameDefinition(
        game_id=spirit_island.GAME_ID,
        name=spirit_island.GAME_NAME,
        content_id=spirit_island.CONTENT_ID,
        object_ids=spirit_island.OBJECT_IDS,
        entries=spirit_island.get_spirit_island_entries,
        achievements=spirit_island.compute_spirit_island_achievements,
        entry_columns=("spirit", "adversary"),
    ),
    bullet.GAME_ID: GameDefinition(
        game_id=bullet.GAME_ID,
        name=bullet.GAME_NAME,
        content_id=bullet.CONTENT_ID,
        object_ids=bullet.OBJECT_IDS,
        entries=bullet.get_bullet_entries,
        achievements=bullet.compute_bullet_achievements,
        entry_columns=("boss", "my_heroine", "heroines"),
    ),
    too_many_bones.GAME_ID: GameDefinition(
        game_id=too_many_bones.GAME_ID,
        name=too_many_bones.GAME_NAME,
        content_id=too_many_bones.CONTENT_ID,
        object_ids=too_many_bones.OBJECT_IDS,
        entries=too_many_bones.get_too_many_bones_entries,
        achievements=too_many_bones.compute_too_many_bones_achievements,
        entry_columns=("tyrant", "my_gearlocs", "gearlocs"),
    ),
    skytear_horde.GAME_ID: GameDefinition(
        game_id=skytear_horde.GAME_ID,
        name=skytear_horde.GAME_NAME,
        content_id=skytear_horde.CONTENT_ID,
        object_ids=skytear_horde.OBJECT_IDS,
        entries=skytear_horde.get_skytear_horde_entries,
        achievements=skytear_horde.compute_skytear_horde_achievements,
        entry_columns=("hero_precon", "enemy_precon", "enemy_level"),
    ),
    unsettled.GAME_ID: GameDefinition(
        game_id=unsettled.GAME_ID,
        name=unsettled.GAME_NAME,
        content_id=unsettled.CONTENT_ID,
        object_ids=unsettled.OBJECT_IDS,
        entries=unsettled.get_unsettled_entries,
        achievements=unsettled.compute_unsettled_achievements,
        entry_columns=("planet", "task"),
    ),
    mistfall.GAME_ID: GameDefinition(
        game_id=mistfall.GAME_ID,
        name=mistfall.GAME_NAME,
        content_id=mistfall.CONTENT_ID,
        object_ids=mistfall.OBJECT_IDS,
        entries=mistfall.get_mistfall_entries,
        achievements=mistfall.compute_mistfall_achievements,
        entry_columns=("hero", "quest"),
    ),
}


def get_game(game_id: str) -> GameDefinition:
    """Look up a game by id; unknown ids raise ``KeyError``."""

    try:
        return GAMES[game_id]
    except KeyError:
        raise KeyError(f"Unknown game '{game_id}'. Available: {', '.join(sorted(GAMES))}") from None


def compute_game_achievements(game_id: str, plays: Sequence[Play], username: str) -> list[Achievement]:
    return get_game(game_id).achievements(plays, username)


def get_game_entries(game_id: str, plays: Sequence[Play], username: str) -> list:
    return get_game(game_id).entries(plays, username)


def compute_all_game_achievement_summaries(
    plays: Sequence[Play],
    username: str,
    game_ids: Optional[Iterable[str]] = None,
) -> list[GameAchievementSummary]:
    selected = [get_game(game_id) for game_id in game_ids] if game_ids else list(GAMES.values())
    return [
        GameAchievementSummary(
            game_id=game.game_id,
            game_name=game.name,
            achievements=game.achievements(plays, username),
        )
        for game in selected
    ]


def flatten_summaries(summaries: Iterable[GameAchievementSummary]) -> list[Achievement]:
    achievements: list[Achievement] = []
    for summary in summaries:
        achievements.extend(summary.achievements)
    return achievements


__all__ = [
    "GAMES",
    "GameAchievementSummary",
    "GameDefinition",
    "compute_all_game_achievement_summaries",
    "compute_game_achievements",
    "flatten_summaries",
    "get_game",
    "get_game_entries",
]
