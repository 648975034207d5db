"""Skytear Horde: hero precons against enemy precons, per box.

Only the user's own color field is read, e.g. ``Kurumo／Sinklings L2`` or
``H: Nupten／E: Phantoms／L3``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from playladder.achievements.canonical import build_achievement_item, build_canonical_counts, sum_quantities
from playladder.achievements.completion import completion_lookup
from playladder.achievements.engine import build_unlocked_achievements_for_game
from playladder.achievements.tracks import (
    build_grouped_per_item_tracks,
    build_individual_item_tracks,
    build_per_item_achievement_base_id,
    build_per_item_track,
    build_play_count_track,
    with_completion,
)
from playladder.achievements.types import Achievement, AchievementTrack
from playladder.content.dictionary import ContentDictionary, load_content
from playladder.games.common import attach_item_completions, build_matchup_tracks, group_lookup, label_key
from playladder.plays import Play, find_player, matches_game, play_quantity, player_is_win
from playladder.tags import bare_segments, get_value, normalize_token, parse_key_value_segments

GAME_ID = "skytearHorde"
GAME_NAME = "Skytear Horde"
CONTENT_ID = "skytear_horde"
OBJECT_IDS = ("344789", "385325")
NAMES = ("Skytear Horde", "Skytear Horde: Monoliths")
UNKNOWN_HERO = "Unknown hero precon"
UNKNOWN_ENEMY = "Unknown enemy precon"

HERO_KEYS = ("H", "Hero", "HeroPrecon", "HP", "Sanctuary", "Castle")
ENEMY_KEYS = ("E", "Enemy", "EnemyPrecon", "EP", "Horde", "HordeSet")

_LEVEL_TOKEN = re.compile(r"^(?:l|lvl|level)\s*([0-9]+)$", re.IGNORECASE)
_LEVEL_SUFFIX = re.compile(r"^(.*?)\s+(?:l|lvl|level)\s*([0-9]+)$", re.IGNORECASE)


@dataclass
class PlayerTags:
    hero_precon: Optional[str] = None
    enemy_precon: Optional[str] = None
    enemy_level: Optional[int] = None
    extra_tags: list[str] = field(default_factory=list)


@dataclass
class SkytearHordeEntry:
    play: Play
    hero_precon: str
    enemy_precon: str
    enemy_level: Optional[int]
    quantity: int
    is_win: bool


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("hero_precons", "enemy_precons"))


def parse_level_token(value: str) -> int | None:
    """``L2``, ``lvl 2`` and ``Level 2`` -> 2."""

    match = _LEVEL_TOKEN.match(normalize_token(value))
    if match is None:
        return None
    level = int(match.group(1))
    return level if level > 0 else None


def split_enemy_level(value: str) -> tuple[str, int | None]:
    """``Sinklings L2`` -> ``("Sinklings", 2)``."""

    token = normalize_token(value)
    match = _LEVEL_SUFFIX.match(token)
    if match is None:
        return token, None
    level = int(match.group(2))
    return normalize_token(match.group(1)), level if level > 0 else None


def parse_player_color(color: str, content: ContentDictionary) -> PlayerTags:
    parsed = parse_key_value_segments(color)
    tags = [normalize_token(tag) for tag in bare_segments(color)]
    tags = [tag for tag in tags if tag]

    def hero(value: str) -> str:
        return content.resolve("hero_precons", value) or normalize_token(value)

    def enemy(value: str) -> str:
        return content.resolve("enemy_precons", value) or normalize_token(value)

    kv_hero = get_value(parsed, HERO_KEYS)
    kv_enemy = get_value(parsed, ENEMY_KEYS)
    hero_precon = hero(kv_hero) if kv_hero else None
    enemy_precon = None
    enemy_level = None
    if kv_enemy:
        token, enemy_level = split_enemy_level(kv_enemy)
        enemy_precon = enemy(token) if token else None

    used: set[str] = set()
    for tag in tags:
        if enemy_level is None:
            level = parse_level_token(tag)
            if level is not None:
                enemy_level = level
                used.add(tag)
                continue
        if hero_precon is None and content.resolve("hero_precons", tag):
            hero_precon = hero(tag)
            used.add(tag)
            continue
        if enemy_precon is None:
            token, level = split_enemy_level(tag)
            if level is not None and enemy_level is None:
                enemy_level = level
            if token and content.resolve("enemy_precons", token):
                enemy_precon = enemy(token)
                used.add(tag)

    # positional fallback: hero first, enemy second
    if hero_precon is None and tags:
        hero_precon = hero(tags[0])
    if enemy_precon is None and len(tags) > 1:
        token, level = split_enemy_level(tags[1])
        enemy_precon = enemy(token) if token else None
        if level is not None and enemy_level is None:
            enemy_level = level

    return PlayerTags(
        hero_precon=hero_precon,
        enemy_precon=enemy_precon,
        enemy_level=enemy_level,
        extra_tags=[tag for tag in tags if tag not in used],
    )


def get_skytear_horde_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[SkytearHordeEntry]:
    content = content or default_content()
    entries: list[SkytearHordeEntry] = []
    for play in plays:
        if not matches_game(play, OBJECT_IDS, names=NAMES):
            continue
        player = find_player(play, username)
        tags = parse_player_color(player.color if player else "", content)
        entries.append(
            SkytearHordeEntry(
                play=play,
                hero_precon=tags.hero_precon or UNKNOWN_HERO,
                enemy_precon=tags.enemy_precon or UNKNOWN_ENEMY,
                enemy_level=tags.enemy_level,
                quantity=play_quantity(play),
                is_win=player_is_win(player),
            )
        )
    return entries


def _matchup_detail(entry: SkytearHordeEntry) -> str:
    return f"{entry.hero_precon} vs {entry.enemy_precon}"


def compute_skytear_horde_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_skytear_horde_entries(plays, username, content)
    enemy_items = [build_achievement_item(label) for label in content.displays("enemy_precons")]
    hero_box = group_lookup(content, "hero_precons", "box")
    enemy_box = group_lookup(content, "enemy_precons", "box")

    heroes = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("hero_precons")],
        [(build_achievement_item(e.hero_precon), e.quantity) for e in entries],
    )
    enemy_plays = build_canonical_counts(
        enemy_items, [(build_achievement_item(e.enemy_precon), e.quantity) for e in entries]
    )
    enemy_wins = build_canonical_counts(
        enemy_items,
        [(build_achievement_item(e.enemy_precon), e.quantity if e.is_win else 0) for e in entries],
    )

    tracks: list[AchievementTrack] = [
        with_completion(build_play_count_track(sum_quantities(entries)), completion_lookup(entries, _matchup_detail))
    ]

    if heroes.items:
        tracks.append(
            build_per_item_track(
                track_id="heroPreconPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "hero precon"),
                verb="Play",
                item_noun="hero precon",
                unit_singular="time",
                items=heroes.items,
                counts_by_item_id=heroes.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="heroPreconPlays",
                    verb="Play",
                    item_noun="hero precon",
                    items=heroes.items,
                    counts_by_item_id=heroes.counts_by_item_id,
                    unit_singular="time",
                ),
                heroes.items,
                entries,
                labels_of=lambda e: [e.hero_precon],
                detail=_matchup_detail,
            )
        )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="heroPreconPlaysByBox",
                verb="Play",
                item_noun="hero precon",
                unit_singular="time",
                items=heroes.items,
                counts_by_item_id=heroes.counts_by_item_id,
                group_of=hero_box,
            )
        )

    if enemy_plays.items:
        tracks.append(
            build_per_item_track(
                track_id="enemyPreconPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "enemy precon"),
                verb="Play",
                item_noun="enemy precon",
                unit_singular="time",
                items=enemy_plays.items,
                counts_by_item_id=enemy_plays.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="enemyPreconPlays",
                    verb="Play",
                    item_noun="enemy precon",
                    items=enemy_plays.items,
                    counts_by_item_id=enemy_plays.counts_by_item_id,
                    unit_singular="time",
                ),
                enemy_plays.items,
                entries,
                labels_of=lambda e: [e.enemy_precon],
                detail=_matchup_detail,
            )
        )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="enemyPreconPlaysByBox",
                verb="Play",
                item_noun="enemy precon",
                unit_singular="time",
                items=enemy_plays.items,
                counts_by_item_id=enemy_plays.counts_by_item_id,
                group_of=enemy_box,
            )
        )

    if enemy_wins.items:
        tracks.append(
            build_per_item_track(
                track_id="enemyPreconWins",
                achievement_base_id=build_per_item_achievement_base_id("Defeat", "enemy precon"),
                verb="Defeat",
                item_noun="enemy precon",
                unit_singular="win",
                items=enemy_wins.items,
                counts_by_item_id=enemy_wins.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="enemyPreconWins",
                    verb="Defeat",
                    item_noun="enemy precon",
                    items=enemy_wins.items,
                    counts_by_item_id=enemy_wins.counts_by_item_id,
                    unit_singular="win",
                ),
                enemy_wins.items,
                entries,
                labels_of=lambda e: [e.enemy_precon],
                detail=_matchup_detail,
                wins_only=True,
            )
        )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="enemyPreconWinsByBox",
                verb="Defeat",
                item_noun="enemy precon",
                unit_singular="win",
                items=enemy_wins.items,
                counts_by_item_id=enemy_wins.counts_by_item_id,
                group_of=enemy_box,
            )
        )

    enemy_boxes = {label_key(enemy_box(label) or "") for label in content.displays("enemy_precons")}
    boxes: dict[str, str] = {}
    for label in content.displays("hero_precons"):
        box = hero_box(label)
        if box and label_key(box) in enemy_boxes:
            boxes.setdefault(label_key(box), box)
    for key, box in boxes.items():
        tracks.extend(
            build_matchup_tracks(
                box,
                plays_track_prefix="preconMatchupPlaysByBox",
                wins_track_prefix="preconMatchupWinsByBox",
                left_noun="hero precon",
                right_noun="enemy precon",
                lefts=[h for h in content.displays("hero_precons") if label_key(hero_box(h) or "") == key],
                rights=[e for e in content.displays("enemy_precons") if label_key(enemy_box(e) or "") == key],
                observed=[(e.hero_precon, e.enemy_precon, e.quantity, e.is_win) for e in entries],
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "SkytearHordeEntry",
    "compute_skytear_horde_achievements",
    "get_skytear_horde_entries",
    "parse_level_token",
    "parse_player_color",
    "split_enemy_level",
]
