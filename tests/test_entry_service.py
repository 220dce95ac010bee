"""Tests for logging and parsing diary entries."""

from uuid import uuid4

import pytest

from nutrition_diary.domain.entries import Collection
from nutrition_diary.domain.numbers import to_float
from nutrition_diary.services.entries import (
    EntryNotFoundError,
    EntryService,
    InvalidEntryError,
    parse_food_entry,
    parse_water_entry,
)
from tests.conftest import InMemoryEntryRepository


def test_log_food_stamps_time_and_drops_id() -> None:
    repo = InMemoryEntryRepository()
    service = EntryService(repo)
    user_id = uuid4()

    entry_id = service.log_food(
        user_id,
        {"id": "client-id", "product_name": "  Apple ", "calories": 95},
        timestamp_ms=1_715_335_200_000,
    )

    stored = repo.fetch_all(user_id, Collection.FOOD_LOGS)[entry_id]
    assert stored == {
        "product_name": "Apple",
        "calories": 95,
        "timestamp_ms": 1_715_335_200_000,
    }


def test_log_food_defaults_to_current_time() -> None:
    repo = InMemoryEntryRepository()
    service = EntryService(repo)
    user_id = uuid4()

    service.log_food(user_id, {"product_name": "Tea"})

    [entry] = service.list_food(user_id)
    assert entry.timestamp_ms > 0
    assert entry.calories_kcal == 0


def test_log_food_requires_name() -> None:
    service = EntryService(InMemoryEntryRepository())

    with pytest.raises(InvalidEntryError):
        service.log_food(uuid4(), {"product_name": "   ", "calories": 10})


@pytest.mark.parametrize("amount", [0, -0.25, "abc"])
def test_log_water_rejects_non_positive(amount: object) -> None:
    service = EntryService(InMemoryEntryRepository())

    with pytest.raises(InvalidEntryError):
        service.log_water(uuid4(), amount)  # type: ignore[arg-type]


def test_list_water_in_store_order() -> None:
    repo = InMemoryEntryRepository()
    service = EntryService(repo)
    user_id = uuid4()
    service.log_water(user_id, 0.25, timestamp_ms=2)
    service.log_water(user_id, 0.5, timestamp_ms=1)

    assert [entry.amount_liters for entry in service.list_water(user_id)] == [
        0.25,
        0.5,
    ]


def test_parse_food_entry_tolerates_bad_fields() -> None:
    entry = parse_food_entry(
        "e1",
        {
            "product_name": "Granola",
            "calories": "210",
            "protein": None,
            "carbohydrates": float("nan"),
            "total_fat": True,
            "sugar": {"label_sugar": 9, "hidden_sugars": ["honey"]},
            "timestamp_ms": "1715335200000",
        },
    )

    assert entry.calories_kcal == 210
    assert entry.protein_grams == 0
    assert entry.carb_grams == 0
    assert entry.fat_grams == 0
    assert entry.sugar_grams == 9
    assert entry.timestamp_ms == 1_715_335_200_000
    assert entry.vegetarian_status == "Unclear"


def test_parse_water_entry_with_missing_amount() -> None:
    entry = parse_water_entry("w1", {"timestamp_ms": 5})

    assert entry.amount_liters == 0
    assert entry.timestamp_ms == 5


def test_parse_food_entry_treats_huge_numbers_as_zero() -> None:
    entry = parse_food_entry(
        "a", {"product_name": "Bar", "calories": 10**400, "protein": 4}
    )

    assert entry.calories_kcal == 0
    assert entry.protein_grams == 4
    assert to_float(-(10**400)) == 0


def test_food_history_is_newest_first() -> None:
    repo = InMemoryEntryRepository()
    service = EntryService(repo)
    user_id = uuid4()
    for name, timestamp_ms in (("Lunch", 2_000), ("Late", 3_000), ("Early", 1_000)):
        service.log_food(user_id, {"product_name": name}, timestamp_ms=timestamp_ms)

    history = service.food_history(user_id)

    assert [entry.product_name for entry in history] == ["Late", "Lunch", "Early"]


def test_get_food_record_returns_every_stored_field() -> None:
    repo = InMemoryEntryRepository()
    service = EntryService(repo)
    user_id = uuid4()
    entry_id = service.log_food(
        user_id,
        {
            "product_name": "Oat Bar",
            "additives": [{"name": "E322", "concern": "Generally safe"}],
            "image_ref": "scans/oat.jpg",
        },
        timestamp_ms=1_000,
    )

    record = service.get_food_record(user_id, entry_id)

    assert record["additives"] == [{"name": "E322", "concern": "Generally safe"}]
    assert record["image_ref"] == "scans/oat.jpg"
    with pytest.raises(EntryNotFoundError):
        service.get_food_record(user_id, "missing")
