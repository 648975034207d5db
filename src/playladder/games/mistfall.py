"""Mistfall and its Heart of the Mists expansion: heroes and quests.

Quest tags may name the quest or give its number (``Q3``, ``Quest 3``,
``M3`` for the base game, ``H3``/``HotM 3`` for Heart of the Mists); a bare
number is read against the box the play was logged for.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Sequence

from playladder.achievements.canonical import build_achievement_item, build_canonical_counts, sum_quantities
from playladder.achievements.completion import completion_lookup
from playladder.achievements.engine import build_unlocked_achievements_for_game
from playladder.achievements.tracks import (
    build_individual_item_tracks,
    build_per_item_achievement_base_id,
    build_per_item_track,
    build_play_count_track,
    with_completion,
)
from playladder.achievements.types import Achievement, AchievementTrack
from playladder.content.dictionary import ContentDictionary, load_content
from playladder.games.common import attach_item_completions
from playladder.plays import Play, find_player, matches_game, play_quantity, player_is_win
from playladder.tags import bare_segments, get_value, parse_key_value_segments

GAME_ID = "mistfall"
GAME_NAME = "Mistfall"
CONTENT_ID = "mistfall"
BASE_OBJECT_ID = "168274"
HEART_OF_THE_MISTS_OBJECT_ID = "193953"
HEART_OF_THE_MISTS_NAME = "Mistfall: Heart of the Mists"
OBJECT_IDS = (BASE_OBJECT_ID, HEART_OF_THE_MISTS_OBJECT_ID)
UNKNOWN_HERO = "Unknown hero"
UNKNOWN_QUEST = "Unknown quest"

HERO_KEYS = ("H", "Hero", "Character")
QUEST_KEYS = ("Q", "Quest", "Scenario")

Box = Literal["mistfall", "hotm"]

_BASE_QUEST = re.compile(r"^(?:M|MF|Mistfall)([0-9]+)$", re.IGNORECASE)
_HOTM_QUEST = re.compile(r"^(?:H|HOM|HOTM|Heart(?:ofthe)?mists?)([0-9]+)$", re.IGNORECASE)
_QUEST_NUMBER = re.compile(r"^(?:quest|q)\s*[:：]?\s*(\d+)\b", re.IGNORECASE)


@dataclass
class MistfallEntry:
    play: Play
    hero: str
    quest: str
    quantity: int
    is_win: bool


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("heroes", "quests"))


def quest_token(value: str, box: Box) -> str | None:
    """Quest id such as ``M3`` or ``H1``; ``None`` when ``value`` is not a quest reference."""

    compact = re.sub(r"\s+", "", value.strip())
    if not compact:
        return None
    match = _BASE_QUEST.match(compact)
    if match:
        return f"M{int(match.group(1))}"
    match = _HOTM_QUEST.match(compact)
    if match:
        return f"H{int(match.group(1))}"
    match = _QUEST_NUMBER.match(value.strip())
    if match is None or int(match.group(1)) <= 0:
        return None
    return f"{'M' if box == 'mistfall' else 'H'}{int(match.group(1))}"


def _quest_from_token(token: str, content: ContentDictionary) -> str:
    return content.resolve("quests", token) or f"Quest {token[1:]}"


def resolve_quest(color: str, tags: Sequence[str], box: Box, content: ContentDictionary) -> str:
    kv_quest = get_value(parse_key_value_segments(color), QUEST_KEYS)
    if kv_quest:
        token = quest_token(kv_quest, box)
        if token:
            return _quest_from_token(token, content)
        return content.resolve("quests", kv_quest) or kv_quest.strip()

    for tag in tags:
        token = quest_token(tag, box)
        if token:
            return _quest_from_token(token, content)
        resolved = content.resolve("quests", tag)
        if resolved:
            return resolved
    return UNKNOWN_QUEST


def resolve_hero(color: str, tags: Sequence[str], content: ContentDictionary) -> str:
    kv_hero = get_value(parse_key_value_segments(color), HERO_KEYS)
    if kv_hero:
        return content.resolve("heroes", kv_hero) or kv_hero.strip()

    for tag in tags:
        if quest_token(tag, "mistfall") or content.resolve("quests", tag):
            continue
        return content.resolve("heroes", tag) or tag.strip()
    return UNKNOWN_HERO


def get_mistfall_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[MistfallEntry]:
    content = content or default_content()
    entries: list[MistfallEntry] = []
    for play in plays:
        if not matches_game(play, OBJECT_IDS, names=(GAME_NAME, HEART_OF_THE_MISTS_NAME)):
            continue
        is_hotm = play.item is not None and (
            play.item.objectid == HEART_OF_THE_MISTS_OBJECT_ID or play.item.name == HEART_OF_THE_MISTS_NAME
        )
        player = find_player(play, username)
        color = player.color if player else ""
        tags = bare_segments(color)
        entries.append(
            MistfallEntry(
                play=play,
                hero=resolve_hero(color, tags, content),
                quest=resolve_quest(color, tags, "hotm" if is_hotm else "mistfall", content),
                quantity=play_quantity(play),
                is_win=player_is_win(player),
            )
        )
    return entries


def compute_mistfall_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_mistfall_entries(plays, username, content)
    quest_items = [build_achievement_item(label) for label in content.displays("quests")]

    heroes = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("heroes")],
        [(build_achievement_item(e.hero), e.quantity) for e in entries],
    )
    quests = build_canonical_counts(quest_items, [(build_achievement_item(e.quest), e.quantity) for e in entries])
    quest_wins = build_canonical_counts(
        quest_items,
        [(build_achievement_item(e.quest), e.quantity if e.is_win else 0) for e in entries],
    )

    tracks: list[AchievementTrack] = [
        with_completion(
            build_play_count_track(sum_quantities(entries)),
            completion_lookup(entries, lambda e: f"{e.hero} • {e.quest}"),
        )
    ]

    if quest_wins.items:
        tracks.append(
            build_per_item_track(
                track_id="questWins",
                achievement_base_id=build_per_item_achievement_base_id("Defeat", "quest"),
                verb="Defeat",
                item_noun="quest",
                unit_singular="win",
                items=quest_wins.items,
                counts_by_item_id=quest_wins.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="questWins",
                    verb="Defeat",
                    item_noun="quest",
                    items=quest_wins.items,
                    counts_by_item_id=quest_wins.counts_by_item_id,
                    unit_singular="win",
                ),
                quest_wins.items,
                entries,
                labels_of=lambda e: [e.quest],
                detail=lambda e: f"{e.quest} win as {e.hero}",
                wins_only=True,
            )
        )

    if quests.items:
        tracks.append(
            build_per_item_track(
                track_id="questPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "quest"),
                verb="Play",
                item_noun="quest",
                unit_singular="time",
                items=quests.items,
                counts_by_item_id=quests.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="questPlays",
                    verb="Play",
                    item_noun="quest",
                    items=quests.items,
                    counts_by_item_id=quests.counts_by_item_id,
                    unit_singular="time",
                ),
                quests.items,
                entries,
                labels_of=lambda e: [e.quest],
                detail=lambda e: f"{e.quest} as {e.hero}",
            )
        )

    if heroes.items:
        tracks.append(
            build_per_item_track(
                track_id="heroPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "hero"),
                verb="Play",
                item_noun="hero",
                unit_singular="time",
                items=heroes.items,
                counts_by_item_id=heroes.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="heroPlays",
                    verb="Play",
                    item_noun="hero",
                    items=heroes.items,
                    counts_by_item_id=heroes.counts_by_item_id,
                    unit_singular="time",
                ),
                heroes.items,
                entries,
                labels_of=lambda e: [e.hero],
                detail=lambda e: f"{e.hero} • {e.quest}",
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "MistfallEntry",
    "compute_mistfall_achievements",
    "get_mistfall_entries",
    "quest_token",
    "resolve_hero",
    "resolve_quest",
]
