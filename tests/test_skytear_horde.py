from __future__ import annotations

import pytest
from conftest import make_play, me

from playladder.games.skytear_horde import (
    compute_skytear_horde_achievements,
    get_skytear_horde_entries,
    parse_level_token,
    parse_player_color,
    split_enemy_level,
)
from playladder.games.skytear_horde import default_content as skytear_content


def _plays():
    return [
        make_play(1, objectid="344789", date="2024-04-01", players=[me("Kurumo／Sinklings L2", win=True)]),
        make_play(2, objectid="385325", date="2024-04-02", players=[me("H: Aurevia／E: Guardians", win=True)]),
        make_play(3, name="Skytear Horde", date="2024-04-03", players=[me("Kurumo Sanctuary／Phantoms")]),
    ]


def _by_id(achievements):
    return {a.id: a for a in achievements}


@pytest.mark.parametrize(
    ("value", "expected"),
    [("L2", 2), ("lvl 3", 3), ("Level 1", 1), ("L0", None), ("Sinklings", None)],
)
def test_parse_level_token(value: str, expected) -> None:
    assert parse_level_token(value) == expected


def test_split_enemy_level() -> None:
    assert split_enemy_level("Sinklings  L2") == ("Sinklings", 2)
    assert split_enemy_level("Phantoms") == ("Phantoms", None)


def test_parse_player_color_keys_tags_and_positions() -> None:
    content = skytear_content()
    tags = parse_player_color("H: Nupten／E: Phantom／L3", content)
    assert (tags.hero_precon, tags.enemy_precon, tags.enemy_level) == ("Nupten", "Phantoms", 3)

    tags = parse_player_color("Kurumo／Sinklings L2", content)
    assert (tags.hero_precon, tags.enemy_precon, tags.enemy_level, tags.extra_tags) == ("Kurumo", "Sinklings", 2, [])

    tags = parse_player_color("Newhero／Newenemy L1", content)
    assert (tags.hero_precon, tags.enemy_precon, tags.enemy_level) == ("Newhero", "Newenemy", 1)


def test_entries_read_only_the_users_player() -> None:
    plays = [
        *_plays(),
        make_play(4, objectid="344789", date="2024-04-04", players=[me("Ozolo／Ravagers", username="bob")]),
    ]
    entries = get_skytear_horde_entries(plays, "alice")
    assert [(e.hero_precon, e.enemy_precon, e.is_win) for e in entries] == [
        ("Kurumo", "Sinklings", True),
        ("Aurevia", "Monolith Guardians", True),
        ("Kurumo", "Phantoms", False),
        ("Unknown hero precon", "Unknown enemy precon", False),
    ]


def test_precon_tracks_record_completing_play() -> None:
    achievements = _by_id(compute_skytear_horde_achievements(_plays(), "alice"))

    kurumo = achievements["skytearHorde-play-hero-precon-kurumo-1"]
    assert kurumo.completion.play_id == 1
    assert kurumo.completion.detail == "Kurumo vs Sinklings"
    assert achievements["skytearHorde-play-hero-precon-kurumo-3"].status == "available"

    phantoms = achievements["skytearHorde-defeat-enemy-precon-phantoms-1"]
    assert phantoms.status == "available"
    assert phantoms.completion is None
    guardians = achievements["skytearHorde-defeat-enemy-precon-monolith-guardians-1"]
    assert guardians.completion.detail == "Aurevia vs Monolith Guardians"


def test_box_and_matchup_checklists() -> None:
    achievements = _by_id(compute_skytear_horde_achievements(_plays(), "alice"))

    assert achievements["skytearHorde-play-each-hero-precon-in-monoliths-1"].status == "completed"
    assert achievements["skytearHorde-play-each-hero-precon-in-skytear-horde-1"].status == "available"
    assert achievements["skytearHorde-defeat-each-enemy-precon-in-monoliths-1"].status == "completed"

    monoliths = achievements["skytearHorde-win-each-hero-precon-against-each-enemy-precon-in-monoliths-1"]
    assert monoliths.status == "completed"
    assert monoliths.title == "Win each hero precon against each enemy precon in Monoliths 1 time"
    assert monoliths.type_label == "Precon Matchup Wins By Box"

    base_box = achievements["skytearHorde-play-each-hero-precon-against-each-enemy-precon-in-skytear-horde-1"]
    assert base_box.progress_label == "2/12 at 1 time each"
