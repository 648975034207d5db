from __future__ import annotations

import pytest
from conftest import make_play, me

from playladder.games.death_may_die import (
    compute_death_may_die_achievements,
    get_death_may_die_entries,
    normalize_elder_one,
    normalize_scenario,
    parse_player_color,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("S3", "Scenario 3"),
        ("scenario 3", "Scenario 3"),
        ("Ep 3", "Scenario 3"),
        ("episode3", "Scenario 3"),
        ("3", "Scenario 3"),
        ("Scenario Finale", "Scenario Finale"),
        ("Rasputin", None),
        ("", None),
    ],
)
def test_normalize_scenario(raw, expected) -> None:
    assert normalize_scenario(raw) == expected


def test_normalize_elder_one_fixes_common_misspelling() -> None:
    assert normalize_elder_one(" cthulu ") == "Cthulhu"
    assert normalize_elder_one("Hastur") == "Hastur"


def test_parse_player_color_bare_tags() -> None:
    tags = parse_player_color("Rasputin／Cthulhu／S1／Beth")
    assert tags.investigator == "Rasputin"
    assert tags.scenario == "Scenario 1"
    assert tags.elder_one == "Cthulhu"
    assert tags.extra_tags == ["Beth"]


def test_parse_player_color_keys_win_over_bare_tags() -> None:
    tags = parse_player_color("I: Sister Beth／EO: Hastur／Ep: 4／Ithaqua")
    assert tags.investigator == "Sister Beth"
    assert tags.elder_one == "Hastur"
    assert tags.scenario == "Scenario 4"


def _plays():
    return [
        make_play(
            1,
            objectid="253344",
            date="2024-01-01",
            players=[
                me("Rasputin／Cthulu／S1／Beth", win=True),
                me("Adam／Cthulhu／Scenario 1", username="bob"),
            ],
        ),
        make_play(2, objectid="253344", date="2024-01-02", players=[me("I: Sister Beth／EO: Hastur／Ep: 4")]),
        make_play(3, objectid="253344", date="2024-01-03", quantity=2, players=[me("Ian／Cthulhu／3", win=True)]),
        make_play(4, name="Cthulhu: Death May Die", date="2024-01-04", players=[me("Borden")]),
        make_play(5, objectid="253344", date="2024-01-05", players=[me("Fred／Ithaqua", username="bob", win=True)]),
        make_play(6, objectid="277659", date="2024-01-06", players=[me("Rasputin／Cthulhu", win=True)]),
    ]


def test_entries_merge_players_and_resolve_investigators() -> None:
    entries = get_death_may_die_entries(_plays(), "ALICE")
    assert [e.play.id for e in entries] == [1, 2, 3, 4, 5]

    first = entries[0]
    assert first.elder_one == "Cthulhu"
    assert first.scenario == "Scenario 1"
    assert first.investigators == ["Rasputin", "Sister Beth", "Lord Adam Benchley"]
    assert first.my_investigator == "Rasputin"
    assert first.is_win is True

    assert (entries[1].elder_one, entries[1].scenario, entries[1].my_investigator) == (
        "Hastur",
        "Scenario 4",
        "Sister Beth",
    )
    assert (entries[3].elder_one, entries[3].scenario) == ("Unknown elder one", "Unknown scenario")

    # another user's win does not count as ours
    assert entries[4].my_investigator is None
    assert entries[4].is_win is False
    assert entries[4].elder_one == "Ithaqua"


def test_elder_one_wins_with_completions() -> None:
    achievements = {a.id: a for a in compute_death_may_die_achievements(_plays(), "alice")}

    cthulhu_1 = achievements["deathMayDie-defeat-elder-one-cthulhu-1"]
    assert cthulhu_1.completion.play_id == 1
    assert cthulhu_1.completion.detail == "Cthulhu win (Scenario 1)"
    cthulhu_3 = achievements["deathMayDie-defeat-elder-one-cthulhu-3"]
    assert cthulhu_3.status == "completed"
    assert cthulhu_3.completion.play_id == 3
    assert achievements["deathMayDie-defeat-elder-one-cthulhu-5"].remaining_plays == 2

    assert achievements["deathMayDie-defeat-elder-one-hastur-1"].status == "available"
    assert achievements["deathMayDie-defeat-elder-one-ithaqua-1"].status == "available"
    assert achievements["deathMayDie-defeat-each-elder-one-1"].progress_label == "1/6 at 1 win each"


def test_play_scenario_and_investigator_tracks() -> None:
    achievements = {a.id: a for a in compute_death_may_die_achievements(_plays(), "alice")}

    plays_3 = achievements["deathMayDie-plays-3"]
    assert plays_3.completion.play_id == 3
    assert plays_3.completion.detail == "Cthulhu (Scenario 3)"
    assert plays_3.completion.play_date == "2024-01-03"
    assert achievements["deathMayDie-plays-5"].status == "completed"
    assert achievements["deathMayDie-plays-8"].progress_label == "6/8 plays"

    assert achievements["deathMayDie-play-scenario-scenario-3-1"].status == "completed"
    assert achievements["deathMayDie-play-scenario-scenario-2-1"].status == "available"

    beth = achievements["deathMayDie-play-investigator-sister-beth-1"]
    assert beth.status == "completed"
    assert beth.completion.detail == "Sister Beth vs Hastur"
    assert achievements["deathMayDie-play-investigator-lord-adam-benchley-1"].status == "available"
    assert achievements["deathMayDie-play-investigator-ian-1"].title == "Play Ian 1 time"


def test_scenario_tracks_record_completing_play() -> None:
    achievements = {a.id: a for a in compute_death_may_die_achievements(_plays(), "alice")}

    scenario_3 = achievements["deathMayDie-play-scenario-scenario-3-1"].completion
    assert scenario_3 is not None
    assert scenario_3.play_id == 3
    assert scenario_3.detail == "Scenario 3 vs Cthulhu"
    assert achievements["deathMayDie-play-scenario-scenario-1-1"].completion.play_id == 1
    assert achievements["deathMayDie-play-scenario-scenario-2-1"].completion is None
