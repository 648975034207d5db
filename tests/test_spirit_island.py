from __future__ import annotations

import pytest
from conftest import make_play, me

from playladder.games.spirit_island import (
    ResolvedAdversary,
    adversary_level,
    compute_spirit_island_achievements,
    default_content,
    get_spirit_island_entries,
    pair_label,
    parse_adversary_level_label,
    resolve_adversary,
)


@pytest.mark.parametrize(
    "token,expected",
    [
        ("England L3", ResolvedAdversary("England", "3")),
        ("England-L2", ResolvedAdversary("England", "2")),
        ("Habsburg lvl2", ResolvedAdversary("Habsburg Monarchy", "2")),
        ("prussia6", ResolvedAdversary("Brandenburg-Prussia", "6")),
        ("Nightmare England", ResolvedAdversary("England L6")),
        ("BP", ResolvedAdversary("Brandenburg-Prussia")),
        ("Lightning", None),
        ("   ", None),
    ],
)
def test_resolve_adversary(token, expected) -> None:
    assert resolve_adversary(token, default_content()) == expected


def test_level_label_helpers() -> None:
    assert ResolvedAdversary("England", "3").label == "England L3"
    assert ResolvedAdversary("England").label == "England"
    assert parse_adversary_level_label("England L3") == ("England", 3)
    assert parse_adversary_level_label("England") is None
    assert adversary_level("Sweden L 4") == 4
    assert adversary_level("Sweden L0") is None
    assert adversary_level("No adversary") is None
    assert pair_label("  River ", "England") == "River × England"


def _plays():
    return [
        make_play(1, objectid="162886", date="2024-03-01", players=[me("S: River／A: England／L: 3", win=True)]),
        make_play(2, objectid="162886", date="2024-03-02", players=[me("Lightning／prussia6", win=True)]),
        make_play(3, name="Spirit Island", date="2024-03-03", players=[me("River／Sweden")]),
        make_play(
            4,
            objectid="162886",
            date="2024-03-04",
            quantity=2,
            players=[me("Lightning／Nightmare England", win=True)],
        ),
        make_play(5, objectid="162886", date="2024-03-05", players=[me("Ocean", win=True)]),
        make_play(6, objectid="162886", date="2024-03-06", players=[me("Mystery Spirit／Mystery Adversary")]),
        make_play(7, objectid="253344", date="2024-03-07", players=[me("River／England", win=True)]),
    ]


def test_entries_resolve_spirits_and_adversaries() -> None:
    entries = get_spirit_island_entries(_plays(), "alice")
    assert [(e.spirit, e.adversary) for e in entries] == [
        ("River Surges in Sunlight", "England L3"),
        ("Lightning's Swift Strike", "Brandenburg-Prussia L6"),
        ("River Surges in Sunlight", "Sweden"),
        ("Lightning's Swift Strike", "England L6"),
        ("Ocean's Hungry Grasp", "No adversary"),
        ("Mystery Spirit", "Mystery Adversary"),
    ]
    assert entries[3].quantity == 2


def test_missing_player_gets_placeholders() -> None:
    play = make_play(1, objectid="162886", players=[me("River／England", username="bob", win=True)])
    (entry,) = get_spirit_island_entries([play], "alice")
    assert entry.spirit == "Unknown spirit"
    assert entry.adversary == "No adversary"
    assert entry.is_win is False


def test_adversary_win_tracks() -> None:
    achievements = {a.id: a for a in compute_spirit_island_achievements(_plays(), "alice")}

    assert achievements["spiritIsland-plays-5"].status == "completed"
    assert achievements["spiritIsland-plays-8"].remaining_plays == 1

    england_3 = achievements["spiritIsland-defeat-adversary-england-3"]
    assert england_3.status == "completed"
    assert england_3.completion.play_id == 4
    assert england_3.completion.detail == "England L6 win as Lightning's Swift Strike"
    assert achievements["spiritIsland-defeat-adversary-england-1"].completion.play_id == 1
    assert achievements["spiritIsland-defeat-adversary-sweden-1"].status == "available"
    assert achievements["spiritIsland-defeat-each-adversary-1"].progress_label == "2/9 at 1 win each"


def test_adversary_level_tracks() -> None:
    achievements = {a.id: a for a in compute_spirit_island_achievements(_plays(), "alice")}

    l3 = achievements["spiritIsland-spirit-island-adversary-level-win-england-l3-1"]
    assert l3.status == "completed"
    assert l3.title == "Defeat England on Level 3"
    assert l3.completion.play_id == 1
    assert achievements["spiritIsland-spirit-island-adversary-level-win-england-l6-1"].completion.play_id == 4
    assert achievements["spiritIsland-spirit-island-adversary-level-win-england-l1-1"].status == "available"
    assert achievements["spiritIsland-spirit-island-adversary-level-win-brandenburg-prussia-l6-1"].status == "completed"
    assert "spiritIsland-spirit-island-adversary-level-win-no-adversary-l1-1" not in achievements


def test_spirit_and_pair_tracks() -> None:
    achievements = {a.id: a for a in compute_spirit_island_achievements(_plays(), "alice")}

    river = achievements["spiritIsland-play-spirit-river-1"]
    assert river.status == "completed"
    assert river.completion.detail == "River Surges in Sunlight vs England L3"
    assert achievements["spiritIsland-play-spirit-lightning-3"].status == "completed"
    assert achievements["spiritIsland-play-spirit-mystery-spirit-1"].status == "completed"

    prefix = "spiritIsland-spirit-island-spirit-adversary-levels-river-surges-in-sunlight-england"
    assert achievements[f"{prefix}-3"].status == "completed"
    pair_next = achievements[f"{prefix}-4"]
    assert pair_next.status == "available"
    assert pair_next.title == "Defeat River Surges in Sunlight × England at level 4"
    assert f"{prefix}-5" not in achievements

    lightning = "spiritIsland-spirit-island-spirit-adversary-levels-lightning-s-swift-strike-england"
    assert achievements[f"{lightning}-6"].status == "completed"
