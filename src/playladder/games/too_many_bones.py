"""Too Many Bones: gearlocs played, tyrants faced and gearloc-vs-tyrant matchups."""

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
    track_item_id,
    with_completion,
)
from playladder.achievements.types import Achievement, AchievementTrack
from playladder.content.dictionary import ContentDictionary, load_content, normalize_id
from playladder.games.common import attach_item_completions, build_matchup_tracks, group_lookup, label_key
from playladder.plays import Play, matches_game, play_quantity, player_is_win
from playladder.tags import (
    bare_segments,
    choose_most_common_or_first,
    get_value,
    normalize_token,
    parse_key_value_segments,
)

GAME_ID = "tooManyBones"
GAME_NAME = "Too Many Bones"
CONTENT_ID = "too_many_bones"
OBJECT_IDS = ("192135",)
UNKNOWN_TYRANT = "Unknown tyrant"

GEARLOC_KEYS = ("G", "Gearloc", "H", "Hero", "C", "Char", "Character")
TYRANT_KEYS = ("T", "Tyrant", "Boss")

_TRAILING_PARENS = re.compile(r"\s*\([^)]*\)\s*$")


@dataclass
class PlayerTags:
    gearloc: Optional[str] = None
    tyrant: Optional[str] = None
    extra_tags: list[str] = field(default_factory=list)


@dataclass
class TooManyBonesEntry:
    play: Play
    tyrant: str
    gearlocs: list[str]
    my_gearlocs: list[str]
    quantity: int
    is_win: bool


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("gearlocs", "tyrants"))


def strip_decorations(value: str) -> str:
    return normalize_token(_TRAILING_PARENS.sub("", normalize_token(value)))


def parse_player_color(color: str, content: ContentDictionary) -> PlayerTags:
    parsed = parse_key_value_segments(color)
    tags = [tag for tag in map(strip_decorations, bare_segments(color)) if tag]

    kv_gearloc = get_value(parsed, GEARLOC_KEYS)
    kv_tyrant = get_value(parsed, TYRANT_KEYS)
    gearloc = (
        strip_decorations(kv_gearloc)
        if kv_gearloc
        else next((tag for tag in tags if content.resolve("gearlocs", tag)), None)
    )
    tyrant = (
        strip_decorations(kv_tyrant)
        if kv_tyrant
        else next((tag for tag in tags if content.resolve("tyrants", tag)), None)
    )

    used = {normalize_id(value) for value in (gearloc, tyrant) if value}
    return PlayerTags(
        gearloc=(content.resolve("gearlocs", gearloc) or gearloc) if gearloc else None,
        tyrant=(content.resolve("tyrants", tyrant) or tyrant) if tyrant else None,
        extra_tags=[tag for tag in tags if normalize_id(tag) not in used],
    )


def _known(content: ContentDictionary, section: str, candidates: Sequence[str]) -> list[str]:
    found: dict[str, str] = {}
    for candidate in candidates:
        resolved = content.resolve(section, candidate)
        if resolved:
            found.setdefault(resolved.lower(), resolved)
    return list(found.values())


def get_too_many_bones_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[TooManyBonesEntry]:
    content = content or default_content()
    user = username.lower()
    entries: list[TooManyBonesEntry] = []

    for play in plays:
        if not matches_game(play, OBJECT_IDS, names=(GAME_NAME,)):
            continue

        players = []
        for player in play.players:
            tags = parse_player_color(player.color, content)
            if tags.gearloc or tags.tyrant or tags.extra_tags:
                players.append((player, tags))

        gearlocs = _known(
            content,
            "gearlocs",
            [value for _, t in players for value in ([t.gearloc] if t.gearloc else []) + t.extra_tags],
        )
        mine = next(((p, t) for p, t in players if p.username.lower() == user), None)
        my_gearlocs: list[str] = []
        if mine is not None:
            tags = mine[1]
            my_gearlocs = _known(content, "gearlocs", ([tags.gearloc] if tags.gearloc else []) + tags.extra_tags)

        tyrants: list[str] = []
        for _, tags in players:
            for value in ([tags.tyrant] if tags.tyrant else []) + tags.extra_tags:
                tyrant = content.resolve("tyrants", value)
                if tyrant:
                    tyrants.append(tyrant)

        entries.append(
            TooManyBonesEntry(
                play=play,
                tyrant=choose_most_common_or_first(tyrants) or UNKNOWN_TYRANT,
                gearlocs=gearlocs,
                my_gearlocs=my_gearlocs,
                quantity=play_quantity(play),
                is_win=mine is not None and player_is_win(mine[0]),
            )
        )
    return entries


def _known_tyrant(entry: TooManyBonesEntry) -> str | None:
    return entry.tyrant if entry.tyrant != UNKNOWN_TYRANT else None


def _play_detail(entry: TooManyBonesEntry) -> str:
    parts = [_known_tyrant(entry), entry.my_gearlocs[0] if entry.my_gearlocs else None]
    return " • ".join(part for part in parts if part) or "Play"


def _tyrant_detail(entry: TooManyBonesEntry) -> str:
    gearloc = f" • {entry.my_gearlocs[0]}" if entry.my_gearlocs else ""
    return f"{entry.tyrant}{gearloc}"


def _gearloc_detail(label: str):
    key = label_key(label)

    def detail(entry: TooManyBonesEntry) -> str:
        gearloc = next((g for g in entry.my_gearlocs if label_key(g) == key), entry.my_gearlocs[0])
        tyrant = _known_tyrant(entry)
        return f"{gearloc} • {tyrant}" if tyrant else gearloc

    return detail


def compute_too_many_bones_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_too_many_bones_entries(plays, username, content)
    tyrant_items = [build_achievement_item(label) for label in content.displays("tyrants")]
    tyrant_group = group_lookup(content, "tyrants")
    gearloc_group = group_lookup(content, "gearlocs")

    tyrant_plays = build_canonical_counts(
        tyrant_items, [(build_achievement_item(e.tyrant), e.quantity) for e in entries]
    )
    tyrant_wins = build_canonical_counts(
        tyrant_items,
        [(build_achievement_item(e.tyrant), e.quantity if e.is_win else 0) for e in entries],
    )
    gearlocs = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("gearlocs")],
        [(build_achievement_item(gearloc), e.quantity) for e in entries for gearloc in e.my_gearlocs],
    )

    tracks: list[AchievementTrack] = [
        with_completion(
            build_play_count_track(sum_quantities(entries)),
            completion_lookup(entries, _play_detail),
        )
    ]

    if tyrant_plays.items:
        tracks.append(
            build_per_item_track(
                track_id="tyrantPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "tyrant"),
                verb="Play",
                item_noun="tyrant",
                unit_singular="time",
                items=tyrant_plays.items,
                counts_by_item_id=tyrant_plays.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="tyrantPlays",
                    verb="Play",
                    item_noun="tyrant",
                    items=tyrant_plays.items,
                    counts_by_item_id=tyrant_plays.counts_by_item_id,
                    unit_singular="time",
                ),
                tyrant_plays.items,
                entries,
                labels_of=lambda e: [_known_tyrant(e)],
                detail=_tyrant_detail,
            )
        )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="tyrantPlaysByGroup",
                verb="Play",
                item_noun="tyrant",
                unit_singular="time",
                items=tyrant_plays.items,
                counts_by_item_id=tyrant_plays.counts_by_item_id,
                group_of=tyrant_group,
            )
        )

    if tyrant_wins.items:
        tracks.append(
            build_per_item_track(
                track_id="tyrantWins",
                achievement_base_id=build_per_item_achievement_base_id("Defeat", "tyrant"),
                verb="Defeat",
                item_noun="tyrant",
                unit_singular="win",
                items=tyrant_wins.items,
                counts_by_item_id=tyrant_wins.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="tyrantWins",
                    verb="Defeat",
                    item_noun="tyrant",
                    items=tyrant_wins.items,
                    counts_by_item_id=tyrant_wins.counts_by_item_id,
                    unit_singular="win",
                ),
                tyrant_wins.items,
                entries,
                labels_of=lambda e: [_known_tyrant(e)],
                detail=_tyrant_detail,
                wins_only=True,
            )
        )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="tyrantWinsByGroup",
                verb="Defeat",
                item_noun="tyrant",
                unit_singular="win",
                items=tyrant_wins.items,
                counts_by_item_id=tyrant_wins.counts_by_item_id,
                group_of=tyrant_group,
            )
        )

    if gearlocs.items:
        tracks.append(
            build_per_item_track(
                track_id="gearlocPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "gearloc"),
                verb="Play",
                item_noun="gearloc",
                unit_singular="time",
                items=gearlocs.items,
                counts_by_item_id=gearlocs.counts_by_item_id,
            )
        )
        label_by_id = {item.id: item.label for item in gearlocs.items}
        for track in build_individual_item_tracks(
            track_id_prefix="gearlocPlays",
            verb="Play",
            item_noun="gearloc",
            items=gearlocs.items,
            counts_by_item_id=gearlocs.counts_by_item_id,
            unit_singular="time",
        ):
            label = label_by_id[track_item_id(track) or ""]
            tracks.extend(
                attach_item_completions(
                    [track],
                    gearlocs.items,
                    entries,
                    labels_of=lambda e: e.my_gearlocs,
                    detail=_gearloc_detail(label),
                )
            )
        tracks.extend(
            build_grouped_per_item_tracks(
                track_id_prefix="gearlocPlaysByGroup",
                verb="Play",
                item_noun="gearloc",
                unit_singular="time",
                items=gearlocs.items,
                counts_by_item_id=gearlocs.counts_by_item_id,
                group_of=gearloc_group,
            )
        )

    groups: dict[str, str] = {}
    for gearloc in content.displays("gearlocs"):
        group = gearloc_group(gearloc)
        if group:
            groups.setdefault(label_key(group), group)
    for key, group in groups.items():
        group_gearlocs = [g for g in content.displays("gearlocs") if label_key(gearloc_group(g) or "") == key]
        group_tyrants = [t for t in content.displays("tyrants") if label_key(tyrant_group(t) or "") == key]
        if not group_gearlocs or not group_tyrants:
            continue
        tracks.extend(
            build_matchup_tracks(
                group,
                plays_track_prefix="gearlocTyrantMatchupPlaysByGroup",
                wins_track_prefix="gearlocTyrantMatchupWinsByGroup",
                left_noun="gearloc",
                right_noun="tyrant",
                lefts=group_gearlocs,
                rights=group_tyrants,
                observed=[(g, e.tyrant, e.quantity, e.is_win) for e in entries for g in e.my_gearlocs],
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "TooManyBonesEntry",
    "compute_too_many_bones_achievements",
    "get_too_many_bones_entries",
    "parse_player_color",
]
