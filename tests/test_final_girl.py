from __future__ import annotations

from conftest import make_play, me

from playladder.games.final_girl import (
    compute_final_girl_achievements,
    get_final_girl_entries,
    resolve_bare_tags,
)
from playladder.games.final_girl import default_content as final_girl_content


def _plays():
    return [
        make_play(1, objectid="277659", date="2024-01-01", players=[me("V: Hans／L: Camp Happy Trails／FG: Laurie", win=True)]),
        make_play(2, name="Final Girl", date="2024-01-02", players=[me("The Poltergeist／Selena")]),
        make_play(3, objectid="277659", date="2024-01-03", quantity=2, players=[me("Hans／Reiko", win=True)]),
        make_play(4, objectid="277659", date="2024-01-04", players=[me("Hans", username="bob")]),
        make_play(5, objectid="162886", date="2024-01-05", players=[me("Hans", win=True)]),
    ]


def _by_id(achievements):
    return {a.id: a for a in achievements}


def test_entries_resolve_keys_and_bare_tags() -> None:
    entries = get_final_girl_entries(_plays(), "Alice")
    assert [e.play.id for e in entries] == [1, 2, 3, 4]
    first, second, third, fourth = entries
    assert (first.villain, first.location, first.final_girl, first.is_win) == (
        "Hans",
        "Camp Happy Trails",
        "Laurie",
        True,
    )
    assert (second.villain, second.location, second.final_girl) == ("The Poltergeist", "House of Blood", "Selena")
    assert third.quantity == 2
    assert (fourth.villain, fourth.location, fourth.final_girl, fourth.is_win) == (
        "Unknown villain",
        "Unknown location",
        "Unknown",
        False,
    )


def test_explicit_key_beats_bare_tag() -> None:
    play = make_play(1, objectid="277659", players=[me("V: Dr. Fright／Hans")])
    (entry,) = get_final_girl_entries([play], "alice")
    assert entry.villain == "Dr. Fright"
    assert entry.location == "Camp Happy Trails"


def test_resolve_bare_tags_joins_multiple_values() -> None:
    resolved = resolve_bare_tags(["Hans", "Dr Fright", "Maple Lane", "Nancy", "Guest Girl"], final_girl_content())
    assert resolved.villain == "Dr. Fright + Hans"
    assert resolved.location == "Maple Lane"
    assert resolved.final_girl == "Guest Girl + Nancy"


def test_play_count_and_villain_win_tracks() -> None:
    achievements = _by_id(compute_final_girl_achievements(_plays(), "alice"))

    assert achievements["finalGirl-plays-5"].status == "completed"
    assert achievements["finalGirl-plays-8"].status == "available"
    assert achievements["finalGirl-plays-8"].remaining_plays == 3
    assert "finalGirl-plays-10" not in achievements

    hans_3 = achievements["finalGirl-defeat-villain-hans-3"]
    assert hans_3.status == "completed"
    assert hans_3.title == "Defeat Hans 3 wins"
    assert hans_3.completion is not None
    assert hans_3.completion.play_id == 3
    assert hans_3.completion.detail == "Hans win as Reiko"
    assert achievements["finalGirl-defeat-villain-hans-1"].completion.play_id == 1
    assert achievements["finalGirl-defeat-villain-hans-5"].status == "available"
    assert achievements["finalGirl-defeat-villain-hans-5"].completion is None

    each = achievements["finalGirl-defeat-each-villain-1"]
    assert each.status == "available"
    assert each.progress_label == "1/3 at 1 win each"


def test_location_final_girl_and_box_tracks() -> None:
    achievements = _by_id(compute_final_girl_achievements(_plays(), "alice"))

    assert achievements["finalGirl-play-location-camp-3"].status == "completed"
    assert achievements["finalGirl-play-location-house-1"].status == "completed"
    assert achievements["finalGirl-play-location-maple-1"].status == "available"

    laurie = achievements["finalGirl-play-final-girl-laurie-1"]
    assert laurie.title == "Play Laurie [The Happy Trails Horror] 1 time"
    assert laurie.status == "completed"
    assert laurie.type_label == "Final Girl Plays"

    happy = achievements["finalGirl-play-box-the-happy-trails-horror-3"]
    assert happy.status == "completed"
    assert achievements["finalGirl-play-box-carnage-at-the-house-of-blood-1"].status == "completed"
    assert achievements["finalGirl-play-each-box-1"].progress_label == "2/3 at 1 time each"


def test_no_plays_still_lists_first_levels() -> None:
    achievements = compute_final_girl_achievements([], "alice")
    statuses = {a.status for a in achievements}
    assert statuses == {"available"}
    assert any(a.id == "finalGirl-plays-1" for a in achievements)


def test_location_final_girl_and_box_completions() -> None:
    achievements = _by_id(compute_final_girl_achievements(_plays(), "alice"))

    camp = achievements["finalGirl-play-location-camp-3"].completion
    assert camp is not None
    assert camp.play_id == 3
    assert camp.detail == "Camp Happy Trails vs Hans"

    selena = achievements["finalGirl-play-final-girl-selena-1"].completion
    assert selena.play_id == 2
    assert selena.detail == "Selena vs The Poltergeist"

    assert achievements["finalGirl-play-box-the-happy-trails-horror-1"].completion.play_id == 1
    assert achievements["finalGirl-play-box-the-happy-trails-horror-3"].completion.play_id == 3
    assert achievements["finalGirl-play-box-carnage-at-the-house-of-blood-1"].completion.play_id == 2
    assert achievements["finalGirl-play-location-maple-1"].completion is None
