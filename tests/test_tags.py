from __future__ import annotations

from playladder.tags import (
    bare_segments,
    choose_most_common_or_first,
    get_value,
    normalize_token,
    parse_key_value_segments,
    split_segments,
)


def test_split_segments_handles_all_delimiters() -> None:
    assert split_segments(" Hans ／ Laurie|Camp / ") == ["Hans", "Laurie", "Camp"]
    assert split_segments("") == []
    assert split_segments(None) == []


def test_parse_key_value_segments_keeps_pairs_and_drops_bare_tokens() -> None:
    text = "V: Ogre／L: Camp／JustAName"
    assert parse_key_value_segments(text) == {"V": "Ogre", "L": "Camp"}
    assert "JustAName" in split_segments(text)
    assert bare_segments(text) == ["JustAName"]


def test_parse_key_value_segments_splits_at_first_colon_and_accepts_fullwidth() -> None:
    assert parse_key_value_segments("Note: a: b") == {"Note": "a: b"}
    assert parse_key_value_segments("FG：Laurie") == {"FG": "Laurie"}


def test_parse_key_value_segments_drops_empty_key_or_value() -> None:
    assert parse_key_value_segments(": Hans／V:／ : x") == {}


def test_later_duplicate_keys_overwrite() -> None:
    assert parse_key_value_segments("V: Hans／V: The Poltergeist") == {"V": "The Poltergeist"}


def test_get_value_returns_first_non_empty_alias() -> None:
    parsed = {"Villain": "Hans", "V": ""}
    assert get_value(parsed, ["V", "Villain"]) == "Hans"
    assert get_value(parsed, ["Location"]) is None


def test_choose_most_common_or_first() -> None:
    assert choose_most_common_or_first(["Hastur", "Cthulhu", "Cthulhu"]) == "Cthulhu"
    assert choose_most_common_or_first(["Hastur", "Cthulhu"]) == "Hastur"
    assert choose_most_common_or_first(["", "  ", None]) is None
    assert choose_most_common_or_first([" Ithaqua "]) == "Ithaqua"


def test_normalize_token_collapses_whitespace() -> None:
    assert normalize_token("  Sister   Beth ") == "Sister Beth"
