"""Mage Knight hero plays and wins."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

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
from playladder.plays import Play, matches_game, play_quantity, player_is_win
from playladder.tags import bare_segments, get_value, normalize_token, parse_key_value_segments

GAME_ID = "mageKnight"
GAME_NAME = "Mage Knight"
CONTENT_ID = "mage_knight"
OBJECT_IDS = ("248562", "96848")
NAME_PREFIXES = ("Mage Knight",)

HERO_KEYS = ("H", "Hero", "Character", "C", "Char")

_TRAILING_PARENS = re.compile(r"\s*\([^)]*\)\s*$")


@dataclass
class PlayerTags:
    hero: Optional[str] = None
    extra_tags: list[str] = field(default_factory=list)


@dataclass
class MageKnightEntry:
    play: Play
    heroes: list[str]
    my_hero: Optional[str]
    quantity: int
    is_win: bool


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("heroes",))


def strip_decorations(value: str) -> str:
    """``Tovak (Lost Legion)`` -> ``Tovak``."""

    return normalize_token(_TRAILING_PARENS.sub("", normalize_token(value)))


def normalize_hero(value: str, content: ContentDictionary) -> str | None:
    token = strip_decorations(value)
    if not token:
        return None
    return content.resolve("heroes", token) or token


def is_hero_token(value: str, content: ContentDictionary) -> bool:
    return content.resolve("heroes", strip_decorations(value)) is not None


def parse_player_color(color: str, content: ContentDictionary) -> PlayerTags:
    parsed = parse_key_value_segments(color)
    tags = [tag for tag in map(strip_decorations, bare_segments(color)) if tag]

    kv_hero = get_value(parsed, HERO_KEYS)
    hero = normalize_hero(kv_hero, content) if kv_hero else None
    if not hero:
        from_tags = next((tag for tag in tags if is_hero_token(tag, content)), None)
        hero = normalize_hero(from_tags, content) if from_tags else None

    hero_key = hero.lower() if hero else None
    extra = [tag for tag in tags if hero_key is None or (normalize_hero(tag, content) or "").lower() != hero_key]
    return PlayerTags(hero=hero, extra_tags=extra)


def get_mage_knight_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[MageKnightEntry]:
    content = content or default_content()
    user = username.lower()
    entries: list[MageKnightEntry] = []

    for play in plays:
        if not matches_game(play, OBJECT_IDS, name_prefixes=NAME_PREFIXES):
            continue

        players = []
        for player in play.players:
            tags = parse_player_color(player.color, content)
            if tags.hero or tags.extra_tags:
                players.append((player, tags))

        heroes: dict[str, str] = {}
        for _, tags in players:
            candidates = ([tags.hero] if tags.hero else []) + tags.extra_tags
            for candidate in candidates:
                if is_hero_token(candidate, content):
                    hero = normalize_hero(candidate, content)
                    if hero:
                        heroes[hero.lower()] = hero

        mine = next(((p, t) for p, t in players if p.username.lower() == user), None)
        my_hero = None
        if mine is not None and mine[1].hero and is_hero_token(mine[1].hero, content):
            my_hero = mine[1].hero

        entries.append(
            MageKnightEntry(
                play=play,
                heroes=list(heroes.values()),
                my_hero=my_hero,
                quantity=play_quantity(play),
                is_win=mine is not None and player_is_win(mine[0]),
            )
        )
    return entries


def compute_mage_knight_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_mage_knight_entries(plays, username, content)
    preferred = [build_achievement_item(label) for label in content.displays("heroes")]
    mine = [e for e in entries if e.my_hero]

    hero_plays = build_canonical_counts(preferred, [(build_achievement_item(e.my_hero), e.quantity) for e in mine])
    hero_wins = build_canonical_counts(
        preferred,
        [(build_achievement_item(e.my_hero), e.quantity if e.is_win else 0) for e in mine],
    )

    tracks: list[AchievementTrack] = [
        with_completion(
            build_play_count_track(sum_quantities(entries)),
            completion_lookup(entries, lambda e: e.my_hero or "Play"),
        )
    ]

    if hero_plays.items:
        tracks.append(
            build_per_item_track(
                track_id="heroPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "hero"),
                verb="Play",
                item_noun="hero",
                unit_singular="time",
                items=hero_plays.items,
                counts_by_item_id=hero_plays.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="heroPlays",
                    verb="Play",
                    item_noun="hero",
                    items=hero_plays.items,
                    counts_by_item_id=hero_plays.counts_by_item_id,
                    unit_singular="time",
                ),
                hero_plays.items,
                entries,
                labels_of=lambda e: [e.my_hero],
                detail=lambda e: e.my_hero or "Play",
            )
        )

    if hero_wins.items:
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="heroWins",
                    verb="Defeat",
                    item_noun="hero",
                    items=hero_wins.items,
                    counts_by_item_id=hero_wins.counts_by_item_id,
                    unit_singular="win",
                    format_item=lambda label: f"as {label}",
                ),
                hero_wins.items,
                entries,
                labels_of=lambda e: [e.my_hero],
                detail=lambda e: f"{e.my_hero} win",
                wins_only=True,
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "MageKnightEntry",
    "compute_mage_knight_achievements",
    "get_mage_knight_entries",
    "parse_player_color",
    "strip_decorations",
]
