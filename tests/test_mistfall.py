from __future__ import annotations

import pytest
from conftest import make_play, me

from playladder.games.mistfall import (
    compute_mistfall_achievements,
    get_mistfall_entries,
    quest_token,
    resolve_quest,
)
from playladder.games.mistfall import default_content as mistfall_content


def _plays():
    return [
        make_play(1, objectid="168274", date="2024-06-01", players=[me("Arvan／M3", win=True)]),
        make_play(2, objectid="193953", date="2024-06-02", players=[me("Celeste／Q1")]),
        make_play(
            3,
            name="Mistfall",
            date="2024-06-03",
            quantity=2,
            players=[me("Hero: Arvan／Quest: Shattered Keep", win=True)],
        ),
        make_play(4, objectid="168274", date="2024-06-04", players=[me("Arvan", username="bob")]),
    ]


def _by_id(achievements):
    return {a.id: a for a in achievements}


@pytest.mark.parametrize(
    ("value", "box", "expected"),
    [
        ("M3", "hotm", "M3"),
        ("MF 2", "hotm", "M2"),
        ("HotM 2", "mistfall", "H2"),
        ("Quest 4", "mistfall", "M4"),
        ("Q1", "hotm", "H1"),
        ("Q0", "mistfall", None),
        ("Arvan", "mistfall", None),
    ],
)
def test_quest_token(value: str, box, expected) -> None:
    assert quest_token(value, box) == expected


def test_resolve_quest_falls_back_to_number() -> None:
    content = mistfall_content()
    assert resolve_quest("", ["Quest 9"], "mistfall", content) == "Quest 9"
    assert resolve_quest("Q: Drowned Shore", [], "mistfall", content) == "Drowned Shore"
    assert resolve_quest("", ["Arvan"], "mistfall", content) == "Unknown quest"


def test_entries_read_box_from_play() -> None:
    entries = get_mistfall_entries(_plays(), "alice")
    assert [(e.hero, e.quest, e.quantity, e.is_win) for e in entries] == [
        ("Arvan", "Shattered Keep", 1, True),
        ("Celeste", "Heart of the Mists", 1, False),
        ("Arvan", "Shattered Keep", 2, True),
        ("Unknown hero", "Unknown quest", 1, False),
    ]


def test_quest_and_hero_tracks_record_completing_play() -> None:
    achievements = _by_id(compute_mistfall_achievements(_plays(), "alice"))

    keep = achievements["mistfall-defeat-quest-shattered-keep-3"]
    assert keep.status == "completed"
    assert keep.completion.play_id == 3
    assert keep.completion.detail == "Shattered Keep win as Arvan"
    assert achievements["mistfall-defeat-quest-shattered-keep-1"].completion.play_id == 1

    heart = achievements["mistfall-play-quest-heart-of-the-mists-1"]
    assert heart.completion.detail == "Heart of the Mists as Celeste"
    assert achievements["mistfall-defeat-quest-heart-of-the-mists-1"].completion is None

    arvan = achievements["mistfall-play-hero-arvan-3"]
    assert arvan.completion.detail == "Arvan • Shattered Keep"
    assert achievements["mistfall-plays-3"].completion.detail == "Arvan • Shattered Keep"
    assert "mistfall-play-hero-unknown-hero-1" not in achievements
