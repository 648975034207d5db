"""Bullet: heroines played and bosses faced.

Color tags look like ``H: Aria／B: Apex`` or just ``Kaze♥／Behemoth``. A boss
or heroine named in another player's tags still counts for the whole session.
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
from playladder.content.dictionary import ContentDictionary, load_content, normalize_id
from playladder.games.common import attach_item_completions, group_lookup
from playladder.plays import Play, matches_game, play_quantity, player_is_win
from playladder.tags import (
    bare_segments,
    choose_most_common_or_first,
    get_value,
    normalize_token,
    parse_key_value_segments,
)

GAME_ID = "bullet"
GAME_NAME = "Bullet"
CONTENT_ID = "bullet"
OBJECT_IDS = ("307305",)
NAME_PREFIXES = ("Bullet",)
UNKNOWN_BOSS = "Unknown boss"

HEROINE_KEYS = ("H", "Heroine", "C", "Char", "Character")
BOSS_KEYS = ("B", "Boss")

_DECORATIONS = re.compile("[♥♡★☆⭐❤️]+")
_TRAILING_PARENS = re.compile(r"\s*\([^)]*\)\s*$")


@dataclass
class PlayerTags:
    heroine: Optional[str] = None
    boss: Optional[str] = None
    extra_tags: list[str] = field(default_factory=list)


@dataclass
class BulletEntry:
    play: Play
    boss: str
    heroines: list[str]
    my_heroine: Optional[str]
    quantity: int
    is_win: bool


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("heroines", "bosses"))


def strip_decorations(value: str) -> str:
    """``Kaze ♥ (2p)`` -> ``Kaze``."""

    token = normalize_token(_DECORATIONS.sub(" ", value))
    return normalize_token(_TRAILING_PARENS.sub("", token))


def _resolve(content: ContentDictionary, section: str, value: str) -> str | None:
    token = strip_decorations(value)
    if not token:
        return None
    return content.resolve(section, token) or token


def parse_player_color(color: str, content: ContentDictionary) -> PlayerTags:
    parsed = parse_key_value_segments(color)
    tags = [tag for tag in map(strip_decorations, bare_segments(color)) if tag]

    kv_heroine = get_value(parsed, HEROINE_KEYS)
    kv_boss = get_value(parsed, BOSS_KEYS)
    heroine_candidate = (
        strip_decorations(kv_heroine)
        if kv_heroine
        else next((tag for tag in tags if content.resolve("heroines", tag)), None)
    )
    boss_candidate = (
        strip_decorations(kv_boss)
        if kv_boss
        else next((tag for tag in tags if content.resolve("bosses", tag)), None)
    )

    used = {normalize_id(value) for value in (heroine_candidate, boss_candidate) if value}
    return PlayerTags(
        heroine=_resolve(content, "heroines", heroine_candidate) if heroine_candidate else None,
        boss=_resolve(content, "bosses", boss_candidate) if boss_candidate else None,
        extra_tags=[tag for tag in tags if normalize_id(tag) not in used],
    )


def get_bullet_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[BulletEntry]:
    content = content or default_content()
    user = username.lower()
    entries: list[BulletEntry] = []

    for play in plays:
        if not matches_game(play, OBJECT_IDS, name_prefixes=NAME_PREFIXES):
            continue

        players = []
        for player in play.players:
            tags = parse_player_color(player.color, content)
            if tags.heroine or tags.boss or tags.extra_tags:
                players.append((player, tags))

        heroines: dict[str, str] = {}
        bosses: list[str] = []
        for _, tags in players:
            for candidate in ([tags.heroine] if tags.heroine else []) + tags.extra_tags:
                heroine = content.resolve("heroines", candidate)
                if heroine:
                    heroines.setdefault(heroine.lower(), heroine)
            for candidate in ([tags.boss] if tags.boss else []) + tags.extra_tags:
                boss = content.resolve("bosses", candidate)
                if boss:
                    bosses.append(boss)

        mine = next(((p, t) for p, t in players if p.username.lower() == user), None)
        my_heroine = content.resolve("heroines", mine[1].heroine) if mine and mine[1].heroine else None

        entries.append(
            BulletEntry(
                play=play,
                boss=choose_most_common_or_first(bosses) or UNKNOWN_BOSS,
                heroines=list(heroines.values()),
                my_heroine=my_heroine,
                quantity=play_quantity(play),
                is_win=mine is not None and player_is_win(mine[0]),
            )
        )
    return entries


def _known_boss(entry: BulletEntry) -> str | None:
    return entry.boss if entry.boss != UNKNOWN_BOSS else None


def _boss_detail(entry: BulletEntry) -> str:
    return " • ".join(part for part in (entry.boss, entry.my_heroine) if part)


def _heroine_detail(entry: BulletEntry) -> str:
    return " • ".join(part for part in (entry.my_heroine, _known_boss(entry)) if part)


def compute_bullet_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_bullet_entries(plays, username, content)
    boss_items = [build_achievement_item(label) for label in content.displays("bosses")]
    boss_set = group_lookup(content, "bosses")

    boss_plays = build_canonical_counts(boss_items, [(build_achievement_item(e.boss), e.quantity) for e in entries])
    boss_wins = build_canonical_counts(
        boss_items,
        [(build_achievement_item(e.boss), e.quantity if e.is_win else 0) for e in entries],
    )
    heroines = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("heroines")],
        [(build_achievement_item(e.my_heroine), e.quantity) for e in entries if e.my_heroine],
    )

    tracks: list[AchievementTrack] = [
        with_completion(
            build_play_count_track(sum_quantities(entries)),
            completion_lookup(
                entries,
                lambda e: " • ".join(part for part in (_known_boss(e), e.my_heroine) if part) or "Play",
            ),
        )
    ]

    if boss_plays.items:
        tracks.append(
            build_per_item_track(
                track_id="bossPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "boss"),
                verb="Play",
                item_noun="boss",
                unit_singular="time",
                items=boss_plays.items,
                counts_by_item_id=boss_plays.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="bossPlays",
                    verb="Play",
                    item_noun="boss",
                    items=boss_plays.items,
                    counts_by_item_id=boss_plays.counts_by_item_id,
                    unit_singular="time",
                ),
                boss_plays.items,
                entries,
                labels_of=lambda e: [_known_boss(e)],
                detail=_boss_detail,
            )
        )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="bossPlaysBySet",
                verb="Play",
                item_noun="boss",
                unit_singular="time",
                items=boss_plays.items,
                counts_by_item_id=boss_plays.counts_by_item_id,
                group_of=boss_set,
            )
        )

    if boss_wins.items:
        tracks.append(
            build_per_item_track(
                track_id="bossWins",
                achievement_base_id=build_per_item_achievement_base_id("Defeat", "boss"),
                verb="Defeat",
                item_noun="boss",
                unit_singular="win",
                items=boss_wins.items,
                counts_by_item_id=boss_wins.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="bossWins",
                    verb="Defeat",
                    item_noun="boss",
                    items=boss_wins.items,
                    counts_by_item_id=boss_wins.counts_by_item_id,
                    unit_singular="win",
                ),
                boss_wins.items,
                entries,
                labels_of=lambda e: [_known_boss(e)],
                detail=_boss_detail,
                wins_only=True,
            )
        )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="bossWinsBySet",
                verb="Defeat",
                item_noun="boss",
                unit_singular="win",
                items=boss_wins.items,
                counts_by_item_id=boss_wins.counts_by_item_id,
                group_of=boss_set,
            )
        )

    if heroines.items:
        tracks.append(
            build_per_item_track(
                track_id="heroinePlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "heroine"),
                verb="Play",
                item_noun="heroine",
                unit_singular="time",
                items=heroines.items,
                counts_by_item_id=heroines.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="heroinePlays",
                    verb="Play",
                    item_noun="heroine",
                    items=heroines.items,
                    counts_by_item_id=heroines.counts_by_item_id,
                    unit_singular="time",
                ),
                heroines.items,
                entries,
                labels_of=lambda e: [e.my_heroine],
                detail=_heroine_detail,
            )
        )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="heroinePlaysBySet",
                verb="Play",
                item_noun="heroine",
                unit_singular="time",
                items=heroines.items,
                counts_by_item_id=heroines.counts_by_item_id,
                group_of=group_lookup(content, "heroines"),
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "BulletEntry",
    "compute_bullet_achievements",
    "get_bullet_entries",
    "parse_player_color",
    "strip_decorations",
]
