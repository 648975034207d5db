"""Final Girl: villains, locations, final girls and boxes from the user's own tags."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from playladder.achievements.canonical import (
    build_achievement_item,
    build_canonical_counts,
    build_item_id_lookup,
    sum_quantities,
)
from playladder.achievements.completion import completion_lookup
from playladder.achievements.engine import build_unlocked_achievements_for_game
from playladder.achievements.progress import is_meaningful_item, normalize_label
from playladder.achievements.tracks import (
    build_individual_item_tracks,
    build_per_item_achievement_base_id,
    build_per_item_track,
    build_play_count_track,
    with_completion,
)
from playladder.achievements.types import Achievement, AchievementTrack
from playladder.content.dictionary import ContentDictionary, load_content
from playladder.games.common import attach_item_completions, label_key
from playladder.plays import Play, find_player, matches_game, play_quantity, player_is_win
from playladder.tags import bare_segments, get_value, parse_key_value_segments

GAME_ID = "finalGirl"
GAME_NAME = "Final Girl"
CONTENT_ID = "final_girl"
OBJECT_IDS = ("277659",)

VILLAIN_KEYS = ("V", "Villain")
LOCATION_KEYS = ("L", "Location")
FINAL_GIRL_KEYS = ("FG", "Final Girl", "FinalGirl")

_VILLAIN_SPLIT = re.compile(r"\s*\+\s*")


@dataclass
class FinalGirlEntry:
    play: Play
    villain: str
    location: str
    final_girl: str
    quantity: int
    is_win: bool


@dataclass
class ResolvedTags:
    villain: Optional[str] = None
    location: Optional[str] = None
    final_girl: Optional[str] = None


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("villains", "locations", "final_girls"))


def resolve_bare_tags(tags: Sequence[str], content: ContentDictionary) -> ResolvedTags:
    """Classify bare tags as villain, location or final girl.

    A villain implies the location it ships with unless a location tag says
    otherwise. Tags matching nothing are taken as final girl names.
    """

    location: Optional[str] = None
    implied_location: Optional[str] = None
    villains: list[str] = []
    final_girls: list[str] = []

    for raw in tags:
        tag = raw.strip()
        if not tag:
            continue
        villain = content.resolve("villains", tag)
        if villain:
            villains.append(villain)
            entity = content.entity("villains", villain)
            if entity is not None and entity.location and implied_location is None:
                implied_location = entity.location
            continue
        found_location = content.resolve("locations", tag)
        if found_location:
            location = found_location
            continue
        final_girls.append(content.resolve("final_girls", tag) or tag)

    return ResolvedTags(
        villain=" + ".join(sorted(set(villains))) if villains else None,
        location=location or implied_location,
        final_girl=" + ".join(sorted(set(final_girls))) if final_girls else None,
    )


def get_final_girl_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[FinalGirlEntry]:
    content = content or default_content()
    entries: list[FinalGirlEntry] = []
    for play in plays:
        if not matches_game(play, OBJECT_IDS, names=(GAME_NAME,)):
            continue
        player = find_player(play, username)
        color = player.color if player else ""
        parsed = parse_key_value_segments(color)
        resolved = resolve_bare_tags(bare_segments(color), content)

        entries.append(
            FinalGirlEntry(
                play=play,
                villain=get_value(parsed, VILLAIN_KEYS) or resolved.villain or "Unknown villain",
                location=get_value(parsed, LOCATION_KEYS) or resolved.location or "Unknown location",
                final_girl=get_value(parsed, FINAL_GIRL_KEYS) or resolved.final_girl or "Unknown",
                quantity=play_quantity(play),
                is_win=player_is_win(player),
            )
        )
    return entries


def _box_for_location(content: ContentDictionary, location: str) -> str:
    entity = content.entity("locations", location)
    if entity is not None and entity.box:
        return normalize_label(entity.box)
    return normalize_label(location)


def _boxes_for_entry(entry: FinalGirlEntry, content: ContentDictionary) -> list[str]:
    boxes: list[str] = []
    location = normalize_label(entry.location)
    if is_meaningful_item(location):
        boxes.append(_box_for_location(content, location))

    villain = normalize_label(entry.villain)
    if is_meaningful_item(villain):
        for part in _VILLAIN_SPLIT.split(villain):
            entity = content.entity("villains", part)
            if entity is not None and entity.location:
                boxes.append(_box_for_location(content, entity.location))

    unique: dict[str, None] = {}
    for box in boxes:
        if box:
            unique.setdefault(box, None)
    return list(unique)


def _final_girl_boxes(entries: Sequence[FinalGirlEntry], content: ContentDictionary) -> dict[str, str]:
    boxes: dict[str, str] = {}
    for entity in content.entities("final_girls"):
        if entity.location and is_meaningful_item(entity.location):
            boxes[label_key(entity.display)] = _box_for_location(content, entity.location)
    for entry in entries:
        if not (is_meaningful_item(entry.final_girl) and is_meaningful_item(entry.location)):
            continue
        boxes.setdefault(label_key(entry.final_girl), _box_for_location(content, entry.location))
    return boxes


def compute_final_girl_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_final_girl_entries(plays, username, content)

    villain_ids = build_item_id_lookup(content.labels_by_id("villains"))
    location_ids = build_item_id_lookup(content.labels_by_id("locations"))
    final_girl_ids = build_item_id_lookup(content.labels_by_id("final_girls"))

    def preferred(section: str, lookup: dict[str, str], fallback: list[str]):
        labels = content.displays(section) or fallback
        return [build_achievement_item(label, lookup) for label in labels]

    villains = build_canonical_counts(
        preferred("villains", villain_ids, [e.villain for e in entries]),
        [(build_achievement_item(e.villain, villain_ids), e.quantity if e.is_win else 0) for e in entries],
    )
    locations = build_canonical_counts(
        preferred("locations", location_ids, [e.location for e in entries]),
        [(build_achievement_item(e.location, location_ids), e.quantity) for e in entries],
    )
    final_girls = build_canonical_counts(
        preferred("final_girls", final_girl_ids, [e.final_girl for e in entries]),
        [(build_achievement_item(e.final_girl, final_girl_ids), e.quantity) for e in entries],
    )

    box_preferred: dict[str, None] = {}
    for entity in content.entities("locations"):
        if entity.box:
            box_preferred.setdefault(normalize_label(entity.box), None)
    boxes = build_canonical_counts(
        [build_achievement_item(box) for box in box_preferred],
        [
            (build_achievement_item(box), entry.quantity)
            for entry in entries
            for box in _boxes_for_entry(entry, content)
        ],
    )
    final_girl_box = _final_girl_boxes(entries, content)

    def format_final_girl(label: str) -> str:
        box = final_girl_box.get(label_key(label))
        return f"{label} [{box}]" if box else label

    tracks: list[AchievementTrack] = [
        with_completion(
            build_play_count_track(sum_quantities(entries)),
            completion_lookup(entries, lambda e: e.villain),
        )
    ]

    if villains.items:
        tracks.append(
            build_per_item_track(
                track_id="villainWins",
                achievement_base_id=build_per_item_achievement_base_id("Defeat", "villain"),
                verb="Defeat",
                item_noun="villain",
                unit_singular="win",
                items=villains.items,
                counts_by_item_id=villains.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="villainWins",
                    verb="Defeat",
                    item_noun="villain",
                    items=villains.items,
                    counts_by_item_id=villains.counts_by_item_id,
                    unit_singular="win",
                ),
                villains.items,
                entries,
                labels_of=lambda e: [e.villain],
                detail=lambda e: f"{e.villain} win as {e.final_girl}",
                wins_only=True,
            )
        )

    if locations.items:
        tracks.append(
            build_per_item_track(
                track_id="locationPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "location"),
                verb="Play",
                item_noun="location",
                unit_singular="time",
                items=locations.items,
                counts_by_item_id=locations.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="locationPlays",
                    verb="Play",
                    item_noun="location",
                    items=locations.items,
                    counts_by_item_id=locations.counts_by_item_id,
                    unit_singular="time",
                ),
                locations.items,
                entries,
                labels_of=lambda e: [e.location],
                detail=lambda e: f"{e.location} vs {e.villain}",
            )
        )

    if final_girls.items:
        tracks.append(
            build_per_item_track(
                track_id="finalGirlPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "final girl"),
                verb="Play",
                item_noun="final girl",
                unit_singular="time",
                items=final_girls.items,
                counts_by_item_id=final_girls.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="finalGirlPlays",
                    verb="Play",
                    item_noun="final girl",
                    items=final_girls.items,
                    counts_by_item_id=final_girls.counts_by_item_id,
                    unit_singular="time",
                    format_item=format_final_girl,
                ),
                final_girls.items,
                entries,
                labels_of=lambda e: [e.final_girl],
                detail=lambda e: f"{e.final_girl} vs {e.villain}",
            )
        )

    if boxes.items:
        tracks.append(
            build_per_item_track(
                track_id="boxPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "box"),
                verb="Play",
                item_noun="box",
                unit_singular="time",
                items=boxes.items,
                counts_by_item_id=boxes.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="boxPlays",
                    verb="Play",
                    item_noun="box",
                    items=boxes.items,
                    counts_by_item_id=boxes.counts_by_item_id,
                    unit_singular="time",
                ),
                boxes.items,
                entries,
                labels_of=lambda e: _boxes_for_entry(e, content),
                detail=lambda e: f"{e.location} vs {e.villain}",
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "FinalGirlEntry",
    "compute_final_girl_achievements",
    "get_final_girl_entries",
    "resolve_bare_tags",
]
