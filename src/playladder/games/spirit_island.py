"""Spirit Island: spirits played, adversaries defeated and the difficulty reached.

Tags come from the user's own color field, e.g. ``S: River／A: England／L: 3``
or the bare form ``Lightning／prussia6``. Adversary labels carry their level as
a trailing ``L<n>`` (``England L3``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from playladder.achievements.canonical import (
    build_achievement_item,
    build_canonical_counts,
    build_canonical_max_values,
    build_item_id_lookup,
    items_from_map,
    slugify,
    strip_trailing_level_label,
    sum_quantities,
)
from playladder.achievements.completion import completion_lookup
from playladder.achievements.engine import build_unlocked_achievements_for_game
from playladder.achievements.progress import is_meaningful_item, normalize_label
from playladder.achievements.tracks import (
    build_individual_item_tracks,
    build_named_count_track,
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

GAME_ID = "spiritIsland"
GAME_NAME = "Spirit Island"
CONTENT_ID = "spirit_island"
OBJECT_IDS = ("162886",)

SPIRIT_ISLAND_LEVELS = [1, 2, 3, 4, 5, 6]
NO_ADVERSARY = "No adversary"

SPIRIT_KEYS = ("S", "Spirit", "Sp", "SpiritIslandSpirit")
ADVERSARY_KEYS = ("A", "Adv", "Adversary", "AL", "AdversaryLevel")
LEVEL_KEYS = ("L", "Level")

_LEVEL_TOKEN = re.compile(r"^(?P<adversary>.*?)(?:(?:\s|-|_)?(?:lvl|level|l))(?P<level>\d+)\s*$", re.IGNORECASE)
_TRAILING_DIGITS = re.compile(r"^(?P<adversary>.*?\D)[\s_-]*(?P<level>\d+)\s*$")
_LEVEL_LABEL = re.compile(r"^(?P<adversary>.*)\s+L(?P<level>\d+)\s*$", re.IGNORECASE)
_LEVEL_ANYWHERE = re.compile(r"\bL\s*(\d+)\b", re.IGNORECASE)


@dataclass
class SpiritIslandEntry:
    play: Play
    spirit: str
    adversary: str
    quantity: int
    is_win: bool


@dataclass(frozen=True)
class ResolvedAdversary:
    adversary: str
    level: Optional[str] = None

    @property
    def label(self) -> str:
        level = (self.level or "").strip()
        return f"{self.adversary} L{level}" if level else self.adversary


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("spirits", "adversaries"))


def resolve_spirit(token: str, content: ContentDictionary) -> str | None:
    return content.resolve("spirits", token)


def resolve_adversary(token: str, content: ContentDictionary) -> ResolvedAdversary | None:
    """Match a token against explicit level entries, ``<name> L<n>`` forms, then names."""

    if not token.strip():
        return None
    explicit = content.resolve("adversary_levels", token)
    if explicit:
        return ResolvedAdversary(explicit)

    match = _LEVEL_TOKEN.match(token.strip())
    if match and match.group("adversary"):
        name = match.group("adversary")
        display = content.resolve("adversaries", name) or name.strip()
        return ResolvedAdversary(display, match.group("level"))

    # "prussia6": a known adversary name directly followed by its level
    match = _TRAILING_DIGITS.match(token.strip())
    if match:
        display = content.resolve("adversaries", match.group("adversary"))
        if display:
            return ResolvedAdversary(display, match.group("level"))

    base = content.resolve("adversaries", token)
    return ResolvedAdversary(base) if base else None


def _spirit_from_tags(color: str, tags: Sequence[str], content: ContentDictionary) -> str:
    from_key = get_value(parse_key_value_segments(color), SPIRIT_KEYS)
    if from_key:
        return resolve_spirit(from_key, content) or from_key.strip()
    for tag in tags:
        resolved = resolve_spirit(tag, content)
        if resolved:
            return resolved
    return tags[0].strip() if tags else "Unknown spirit"


def _adversary_from_tags(color: str, tags: Sequence[str], content: ContentDictionary) -> str:
    parsed = parse_key_value_segments(color)
    from_key = get_value(parsed, ADVERSARY_KEYS)
    level = get_value(parsed, LEVEL_KEYS)

    if from_key:
        resolved = resolve_adversary(from_key, content)
        if resolved:
            if level and not resolved.level:
                return ResolvedAdversary(resolved.adversary, level).label
            return resolved.label
        return f"{from_key.strip()} L{level.strip()}" if level else from_key.strip()

    if level:
        for tag in tags:
            resolved = resolve_adversary(tag, content)
            if resolved:
                return ResolvedAdversary(resolved.adversary, level).label

    for tag in tags:
        resolved = resolve_adversary(tag, content)
        if resolved:
            return resolved.label

    return tags[1].strip() if len(tags) > 1 else NO_ADVERSARY


def get_spirit_island_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[SpiritIslandEntry]:
    content = content or default_content()
    entries: list[SpiritIslandEntry] = []
    for play in plays:
        if not matches_game(play, OBJECT_IDS, names=(GAME_NAME,)):
            continue
        player = find_player(play, username)
        color = player.color if player else ""
        tags = bare_segments(color)
        entries.append(
            SpiritIslandEntry(
                play=play,
                spirit=_spirit_from_tags(color, tags, content),
                adversary=_adversary_from_tags(color, tags, content),
                quantity=play_quantity(play),
                is_win=player_is_win(player),
            )
        )
    return entries


def parse_adversary_level_label(value: str) -> tuple[str, int] | None:
    """``England L3`` -> ``("England", 3)``."""

    match = _LEVEL_LABEL.match(value.strip())
    if not match or not match.group("adversary").strip():
        return None
    return match.group("adversary").strip(), int(match.group("level"))


def adversary_level(value: str) -> int | None:
    match = _LEVEL_ANYWHERE.search(value)
    if not match:
        return None
    level = int(match.group(1))
    return level if level > 0 else None


def pair_label(spirit: str, adversary: str) -> str:
    return f"{normalize_label(spirit)} × {normalize_label(adversary)}"


def compute_spirit_island_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_spirit_island_entries(plays, username, content)

    spirits_by_id = content.labels_by_id("spirits")
    adversaries_by_id = content.labels_by_id("adversaries")
    spirit_ids = build_item_id_lookup(spirits_by_id)
    adversary_ids = build_item_id_lookup(adversaries_by_id)

    level_wins: dict[str, int] = {}
    level_bases: dict[str, None] = dict.fromkeys(adversaries_by_id.values())
    for entry in entries:
        parsed = parse_adversary_level_label(entry.adversary)
        if parsed is None or parsed[1] not in SPIRIT_ISLAND_LEVELS:
            continue
        base, level = parsed
        level_bases.setdefault(base, None)
        if entry.is_win:
            label = f"{base} L{level}"
            level_wins[label] = level_wins.get(label, 0) + entry.quantity

    spirits = build_canonical_counts(
        items_from_map(spirits_by_id),
        [(build_achievement_item(e.spirit, spirit_ids), e.quantity) for e in entries],
    )
    adversaries = build_canonical_counts(
        items_from_map(adversaries_by_id),
        [
            (build_achievement_item(strip_trailing_level_label(e.adversary), adversary_ids), e.quantity if e.is_win else 0)
            for e in entries
        ],
    )

    pair_levels_observed = []
    for entry in entries:
        if not entry.is_win:
            continue
        level = adversary_level(entry.adversary)
        if level is None or level not in SPIRIT_ISLAND_LEVELS:
            continue
        pair_levels_observed.append((pair_label(entry.spirit, strip_trailing_level_label(entry.adversary)), level))
    pair_levels = build_canonical_max_values(
        [pair_label(s, a) for s in spirits_by_id.values() for a in adversaries_by_id.values()],
        pair_levels_observed,
    )

    tracks: list[AchievementTrack] = [
        with_completion(
            build_play_count_track(sum_quantities(entries)),
            completion_lookup(entries, lambda e: f"{e.spirit} vs {e.adversary}"),
        )
    ]

    if adversaries.items:
        level_tracks: list[AchievementTrack] = []
        for base in level_bases:
            if not is_meaningful_item(normalize_label(base)):
                continue
            slug = slugify(base)
            for difficulty in SPIRIT_ISLAND_LEVELS:
                wanted = label_key(f"{base} L{difficulty}")
                track = build_named_count_track(
                    track_id=f"adversaryLevelWin:{slug}-l{difficulty}",
                    achievement_base_id=f"spirit-island-adversary-level-win-{slug}-l{difficulty}",
                    current=level_wins.get(f"{base} L{difficulty}", 0),
                    unit_singular="win",
                    levels=[1],
                    title_for_level=lambda _level, base=base, difficulty=difficulty: (
                        f"Defeat {base} on Level {difficulty}"
                    ),
                )
                level_tracks.append(
                    with_completion(
                        track,
                        completion_lookup(
                            entries,
                            lambda e: f"{e.spirit} vs {e.adversary}",
                            lambda e, wanted=wanted: e.is_win and label_key(e.adversary) == wanted,
                        ),
                    )
                )

        tracks.append(
            build_per_item_track(
                track_id="adversaryWins",
                achievement_base_id=build_per_item_achievement_base_id("Defeat", "adversary"),
                verb="Defeat",
                item_noun="adversary",
                unit_singular="win",
                items=adversaries.items,
                counts_by_item_id=adversaries.counts_by_item_id,
            )
        )
        tracks.extend(level_tracks)
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="adversaryWins",
                    verb="Defeat",
                    item_noun="adversary",
                    items=adversaries.items,
                    counts_by_item_id=adversaries.counts_by_item_id,
                    unit_singular="win",
                ),
                adversaries.items,
                entries,
                labels_of=lambda e: [strip_trailing_level_label(e.adversary)],
                detail=lambda e: f"{e.adversary} win as {e.spirit}",
                wins_only=True,
            )
        )

    if spirits.items:
        tracks.append(
            build_per_item_track(
                track_id="spiritPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "spirit"),
                verb="Play",
                item_noun="spirit",
                unit_singular="time",
                items=spirits.items,
                counts_by_item_id=spirits.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="spiritPlays",
                    verb="Play",
                    item_noun="spirit",
                    items=spirits.items,
                    counts_by_item_id=spirits.counts_by_item_id,
                    unit_singular="time",
                ),
                spirits.items,
                entries,
                labels_of=lambda e: [e.spirit],
                detail=lambda e: f"{e.spirit} vs {e.adversary}",
            )
        )

    for pair in pair_levels.items:
        slug = slugify(pair)
        tracks.append(
            build_named_count_track(
                track_id=f"spiritAdversaryLevels:{slug}",
                achievement_base_id=f"spirit-island-spirit-adversary-levels-{slug}",
                current=pair_levels.counts_by_item.get(pair, 0),
                unit_singular="level",
                title_for_level=lambda level, pair=pair: f"Defeat {pair} at level {level}",
                levels=SPIRIT_ISLAND_LEVELS,
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "SPIRIT_ISLAND_LEVELS",
    "SpiritIslandEntry",
    "adversary_level",
    "compute_spirit_island_achievements",
    "get_spirit_island_entries",
    "pair_label",
    "parse_adversary_level_label",
    "resolve_adversary",
]
