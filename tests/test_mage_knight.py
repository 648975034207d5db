from __future__ import annotations

from conftest import make_play, me

from playladder.games.mage_knight import (
    compute_mage_knight_achievements,
    default_content,
    get_mage_knight_entries,
    parse_player_color,
    strip_decorations,
)


def test_strip_decorations() -> None:
    assert strip_decorations("  Tovak   (Lost Legion) ") == "Tovak"
    assert strip_decorations("Goldyx") == "Goldyx"


def test_parse_player_color_prefers_hero_key() -> None:
    content = default_content()
    tags = parse_player_color("H: wolf hawk／Tovak", content)
    assert tags.hero == "Wolfhawk"
    assert tags.extra_tags == ["Tovak"]

    tags = parse_player_color("Expert／Tovak (Lost Legion)", content)
    assert tags.hero == "Tovak"
    assert tags.extra_tags == ["Expert"]

    assert parse_player_color("Gandalf", content).hero is None


def _plays():
    return [
        make_play(1, objectid="248562", date="2024-02-01", players=[me("Tovak (Lost Legion)", win=True)]),
        make_play(
            2,
            name="Mage Knight Ultimate Edition",
            date="2024-02-02",
            players=[me("H: wolf hawk"), me("Arythea", username="bob", win=True)],
        ),
        make_play(3, objectid="96848", date="2024-02-03", quantity=2, players=[me("Tovak", win=True)]),
        make_play(4, objectid="248562", date="2024-02-04", players=[me("Gandalf")]),
        make_play(5, objectid="162886", date="2024-02-05", players=[me("Tovak", win=True)]),
    ]


def test_entries_collect_heroes_and_my_hero() -> None:
    entries = get_mage_knight_entries(_plays(), "alice")
    assert [e.play.id for e in entries] == [1, 2, 3, 4]
    assert entries[0].my_hero == "Tovak"
    assert entries[1].heroes == ["Wolfhawk", "Arythea"]
    assert entries[1].my_hero == "Wolfhawk"
    assert entries[1].is_win is False
    assert entries[3].my_hero is None
    assert entries[3].heroes == []


def test_hero_play_and_win_tracks() -> None:
    achievements = {a.id: a for a in compute_mage_knight_achievements(_plays(), "alice")}

    assert achievements["mageKnight-plays-5"].status == "completed"
    assert achievements["mageKnight-plays-5"].completion.detail == "Play"
    assert achievements["mageKnight-plays-5"].completion.play_id == 4

    tovak_wins = achievements["mageKnight-defeat-hero-tovak-3"]
    assert tovak_wins.status == "completed"
    assert tovak_wins.title == "Defeat as Tovak 3 wins"
    assert tovak_wins.type_label == "Hero Wins"
    assert tovak_wins.completion.play_id == 3
    assert tovak_wins.completion.detail == "Tovak win"

    assert achievements["mageKnight-play-hero-wolfhawk-1"].status == "completed"
    assert achievements["mageKnight-play-hero-wolfhawk-1"].completion.play_id == 2
    assert achievements["mageKnight-defeat-hero-wolfhawk-1"].status == "available"
    assert achievements["mageKnight-play-each-hero-1"].progress_label == "2/8 at 1 time each"
    assert not any(a.id.startswith("mageKnight-defeat-each-hero") for a in achievements.values())
