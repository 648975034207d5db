from __future__ import annotations

import pytest

from playladder.achievements.progress import (
    compute_counter_progress,
    compute_per_item_progress,
    is_meaningful_item,
    pluralize,
)


def test_counter_progress_caps_value_at_target() -> None:
    progress = compute_counter_progress(7, 5, "win")
    assert progress.is_complete
    assert progress.remaining_plays == 0
    assert progress.progress_value == 5
    assert progress.progress_target == 5
    assert progress.progress_label == "5/5 wins"


def test_counter_progress_floors_target_and_current() -> None:
    progress = compute_counter_progress(-3, 0, "play")
    assert progress.progress_target == 1
    assert progress.plays_so_far == 0
    assert progress.remaining_plays == 1
    assert progress.progress_label == "0/1 play"
    assert not progress.is_complete


@pytest.mark.parametrize("current", range(0, 12))
@pytest.mark.parametrize("target", [1, 3, 5, 10])
def test_counter_progress_properties(current: int, target: int) -> None:
    progress = compute_counter_progress(current, target, "play")
    assert progress.progress_value <= target
    if current <= target:
        assert progress.remaining_plays + progress.progress_value == target
    assert progress.is_complete == (progress.remaining_plays == 0)


def test_per_item_progress_sums_remaining_work() -> None:
    progress = compute_per_item_progress(["a", "b", "c"], {"a": 5, "b": 2}, 3, "time")
    assert not progress.is_complete
    assert progress.progress_value == 1
    assert progress.progress_target == 3
    assert progress.remaining_plays == 0 + 1 + 3
    assert progress.plays_so_far == 3 + 2 + 0
    assert progress.progress_label == "1/3 at 3 times each"


def test_per_item_progress_complete_when_every_item_meets_target() -> None:
    progress = compute_per_item_progress(["a", "b"], {"a": 1, "b": 4}, 1, "win")
    assert progress.is_complete
    assert progress.progress_label == "2/2 at 1 win each"


def test_per_item_progress_empty_list_is_never_complete() -> None:
    progress = compute_per_item_progress([], {}, 1, "win")
    assert not progress.is_complete
    assert progress.progress_target == 0
    assert progress.progress_value == 0


@pytest.mark.parametrize(
    "counts",
    [{}, {"a": 1}, {"a": 3, "b": 3}, {"a": 9, "b": 0, "c": 2}],
)
def test_per_item_progress_properties(counts: dict[str, int]) -> None:
    items = ["a", "b", "c"]
    progress = compute_per_item_progress(items, counts, 2, "time")
    assert progress.progress_value <= progress.progress_target == len(items)
    assert progress.is_complete == (progress.progress_value == progress.progress_target)


def test_pluralize() -> None:
    assert pluralize(1, "win") == "win"
    assert pluralize(0, "win") == "wins"
    assert pluralize(2, "box", "boxes") == "boxes"


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Hans", True),
        ("", False),
        ("   ", False),
        ("Unknown", False),
        ("unknown villain", False),
        ("No adversary", False),
        ("Unknowable Horror", True),
    ],
)
def test_is_meaningful_item(label: str, expected: bool) -> None:
    assert is_meaningful_item(label) is expected
