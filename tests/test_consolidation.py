"""Tests for duplicate consolidation."""

from nutrition_diary.domain.entries import FoodEntry
from nutrition_diary.services.consolidation import consolidate


def _entry(entry_id: str, name: str, calories: float) -> FoodEntry:
    return FoodEntry(
        id=entry_id, timestamp_ms=0, product_name=name, calories_kcal=calories
    )


def test_merges_close_duplicates_and_keeps_order() -> None:
    items = consolidate(
        [_entry("a", "Bar", 100), _entry("b", "Bar", 103), _entry("c", "Bar", 200)]
    )

    assert [(item.count, item.total_calories_kcal) for item in items] == [
        (2, 203),
        (1, 200),
    ]
    assert items[0].representative.id == "a"
    assert items[0].member_ids == ["a", "b"]
    assert items[0].latest_id == "b"


def test_tolerance_is_exclusive() -> None:
    items = consolidate([_entry("a", "Bar", 100), _entry("b", "Bar", 105)])

    assert [item.count for item in items] == [1, 1]


def test_different_names_are_never_merged() -> None:
    items = consolidate([_entry("a", "Apple", 50), _entry("b", "apple", 50)])

    assert len(items) == 2


def test_tolerance_is_checked_against_first_member() -> None:
    items = consolidate(
        [_entry("a", "Bar", 100), _entry("b", "Bar", 104), _entry("c", "Bar", 108)]
    )

    assert [item.member_ids for item in items] == [["a", "b"], ["c"]]


def test_late_entry_joins_first_matching_row() -> None:
    items = consolidate(
        [_entry("a", "Bar", 100), _entry("b", "Bar", 200), _entry("c", "Bar", 102)]
    )

    assert [item.member_ids for item in items] == [["a", "c"], ["b"]]
    assert items[0].total_calories_kcal == 202


def test_empty_group() -> None:
    assert consolidate([]) == []
