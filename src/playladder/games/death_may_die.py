"""Cthulhu: Death May Die.

Every player's color field may carry the investigator they played plus the
scenario and elder one of the session, e.g. ``Rasputin／Cthulhu／S1`` or
``I: Sister Beth／EO: Hastur／Ep: 4``. The session's elder one and scenario are
merged across players (most common, then first seen).
"""

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
from playladder.tags import (
    bare_segments,
    choose_most_common_or_first,
    get_value,
    normalize_token,
    parse_key_value_segments,
)

GAME_ID = "deathMayDie"
GAME_NAME = "Cthulhu: Death May Die"
CONTENT_ID = "death_may_die"
OBJECT_IDS = ("253344",)

INVESTIGATOR_KEYS = ("I", "Inv", "Investigator", "C", "Char", "Character")
SCENARIO_KEYS = ("S", "Scenario", "Sc", "E", "Ep", "Episode")
ELDER_ONE_KEYS = (
    "EO",
    "ElderOne",
    "Elder One",
    "OldOne",
    "Old One",
    "GOO",
    "GreatOldOne",
    "Great Old One",
)

_SCENARIO_PATTERNS = (
    re.compile(r"^s(?:cenario)?\s*([0-9]+)$"),
    re.compile(r"^(?:episode|ep)\s*([0-9]+)$"),
    re.compile(r"^([0-9]+)$"),
)
_SCENARIO_WORD = re.compile(r"^scenario\b", re.IGNORECASE)


@dataclass
class PlayerTags:
    investigator: Optional[str] = None
    elder_one: Optional[str] = None
    scenario: Optional[str] = None
    extra_tags: list[str] = field(default_factory=list)


@dataclass
class DeathMayDieEntry:
    play: Play
    elder_one: str
    scenario: str
    investigators: list[str]
    my_investigator: Optional[str]
    quantity: int
    is_win: bool


def default_content() -> ContentDictionary:
    return load_content(CONTENT_ID, ("elder_ones", "scenarios", "investigators"))


def normalize_elder_one(value: str) -> str:
    token = normalize_token(value)
    if token.lower() in ("cthulu", "cthulhu"):
        return "Cthulhu"
    return token


def normalize_scenario(value: str) -> str | None:
    """``S3``, ``Scenario 3``, ``Ep 3`` and ``3`` all become ``Scenario 3``."""

    token = normalize_token(value)
    if not token:
        return None
    lowered = token.lower()
    for pattern in _SCENARIO_PATTERNS:
        match = pattern.match(lowered)
        if match:
            return f"Scenario {match.group(1)}"
    return token if _SCENARIO_WORD.match(token) else None


def normalize_investigator(value: str, content: ContentDictionary) -> str:
    token = normalize_token(value)
    return content.resolve("investigators", token) or token


def _canonical_elder_one(value: str, content: ContentDictionary) -> str:
    token = normalize_elder_one(value)
    return content.resolve("elder_ones", token) or token


def parse_player_color(color: str) -> PlayerTags:
    parsed = parse_key_value_segments(color)
    tags = bare_segments(color)

    investigator = get_value(parsed, INVESTIGATOR_KEYS) or (tags[0] if tags else "")

    kv_scenario = get_value(parsed, SCENARIO_KEYS)
    if kv_scenario:
        scenario = normalize_scenario(kv_scenario)
    else:
        scenario = next((s for s in map(normalize_scenario, tags) if s is not None), None)

    others = [tag for idx, tag in enumerate(tags) if idx > 0 and normalize_scenario(tag) is None]
    kv_elder_one = get_value(parsed, ELDER_ONE_KEYS)
    if kv_elder_one:
        elder_one = normalize_elder_one(kv_elder_one)
    elif others:
        elder_one = normalize_elder_one(others[0])
    else:
        elder_one = None

    extra = [normalize_token(tag) for tag in others[1 if elder_one else 0 :]]
    return PlayerTags(
        investigator=normalize_token(investigator) or None,
        elder_one=elder_one,
        scenario=scenario,
        extra_tags=[tag for tag in extra if tag],
    )


def get_death_may_die_entries(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[DeathMayDieEntry]:
    content = content or default_content()
    user = username.lower()
    entries: list[DeathMayDieEntry] = []

    for play in plays:
        if not matches_game(play, OBJECT_IDS, names=(GAME_NAME,)):
            continue

        players = []
        for player in play.players:
            tags = parse_player_color(player.color)
            if tags.investigator or tags.elder_one or tags.scenario:
                players.append((player, tags))

        investigators: dict[str, str] = {}
        for _, tags in players:
            if tags.investigator:
                name = normalize_investigator(tags.investigator, content)
                investigators[name.lower()] = name
            for tag in tags.extra_tags:
                resolved = content.resolve("investigators", tag)
                if resolved:
                    investigators[resolved.lower()] = resolved

        mine = next(((p, t) for p, t in players if p.username.lower() == user), None)
        my_investigator = None
        if mine is not None and mine[1].investigator:
            my_investigator = normalize_investigator(mine[1].investigator, content)

        elder_one = choose_most_common_or_first(
            [_canonical_elder_one(t.elder_one, content) for _, t in players if t.elder_one]
        )
        scenario = choose_most_common_or_first(
            [normalize_scenario(t.scenario) or t.scenario for _, t in players if t.scenario]
        )

        entries.append(
            DeathMayDieEntry(
                play=play,
                elder_one=elder_one or "Unknown elder one",
                scenario=scenario or "Unknown scenario",
                investigators=list(investigators.values()),
                my_investigator=my_investigator,
                quantity=play_quantity(play),
                is_win=mine is not None and player_is_win(mine[0]),
            )
        )
    return entries


def compute_death_may_die_achievements(
    plays: Sequence[Play],
    username: str,
    content: ContentDictionary | None = None,
) -> list[Achievement]:
    content = content or default_content()
    entries = get_death_may_die_entries(plays, username, content)

    elder_ones = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("elder_ones")],
        [(build_achievement_item(e.elder_one), e.quantity if e.is_win else 0) for e in entries],
    )
    scenarios = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("scenarios")],
        [(build_achievement_item(e.scenario), e.quantity) for e in entries],
    )
    investigators = build_canonical_counts(
        [build_achievement_item(label) for label in content.displays("investigators")],
        [(build_achievement_item(e.my_investigator), e.quantity) for e in entries if e.my_investigator],
    )

    tracks: list[AchievementTrack] = [
        with_completion(
            build_play_count_track(sum_quantities(entries)),
            completion_lookup(entries, lambda e: f"{e.elder_one} ({e.scenario})"),
        )
    ]

    if elder_ones.items:
        tracks.append(
            build_per_item_track(
                track_id="elderOneWins",
                achievement_base_id=build_per_item_achievement_base_id("Defeat", "elder one"),
                verb="Defeat",
                item_noun="elder one",
                unit_singular="win",
                items=elder_ones.items,
                counts_by_item_id=elder_ones.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="elderOneWins",
                    verb="Defeat",
                    item_noun="elder one",
                    items=elder_ones.items,
                    counts_by_item_id=elder_ones.counts_by_item_id,
                    unit_singular="win",
                ),
                elder_ones.items,
                entries,
                labels_of=lambda e: [e.elder_one],
                detail=lambda e: f"{e.elder_one} win ({e.scenario})",
                wins_only=True,
            )
        )

    if scenarios.items:
        tracks.append(
            build_per_item_track(
                track_id="scenarioPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "scenario"),
                verb="Play",
                item_noun="scenario",
                unit_singular="time",
                items=scenarios.items,
                counts_by_item_id=scenarios.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="scenarioPlays",
                    verb="Play",
                    item_noun="scenario",
                    items=scenarios.items,
                    counts_by_item_id=scenarios.counts_by_item_id,
                    unit_singular="time",
                ),
                scenarios.items,
                entries,
                labels_of=lambda e: [e.scenario],
                detail=lambda e: f"{e.scenario} vs {e.elder_one}",
            )
        )

    if investigators.items:
        tracks.append(
            build_per_item_track(
                track_id="investigatorPlays",
                achievement_base_id=build_per_item_achievement_base_id("Play", "investigator"),
                verb="Play",
                item_noun="investigator",
                unit_singular="time",
                items=investigators.items,
                counts_by_item_id=investigators.counts_by_item_id,
            )
        )
        tracks.extend(
            attach_item_completions(
                build_individual_item_tracks(
                    track_id_prefix="investigatorPlays",
                    verb="Play",
                    item_noun="investigator",
                    items=investigators.items,
                    counts_by_item_id=investigators.counts_by_item_id,
                    unit_singular="time",
                ),
                investigators.items,
                entries,
                labels_of=lambda e: [e.my_investigator],
                detail=lambda e: f"{e.my_investigator} vs {e.elder_one}",
            )
        )

    return build_unlocked_achievements_for_game(GAME_ID, GAME_NAME, tracks)


__all__ = [
    "DeathMayDieEntry",
    "compute_death_may_die_achievements",
    "get_death_may_die_entries",
    "normalize_elder_one",
    "normalize_scenario",
    "parse_player_color",
]
