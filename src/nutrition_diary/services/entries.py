"""Entry store interface and logging of food and water entries."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from nutrition_diary.domain.entries import Collection, FoodEntry, WaterEntry
from nutrition_diary.domain.numbers import to_float

_logger = logging.getLogger(__name__)

Snapshot = dict[str, dict[str, object]]


class RepositoryUnavailableError(RuntimeError):
    """Raised when the entry store cannot be read or written."""


class EntryNotFoundError(LookupError):
    """Raised when an entry id is not present in a collection."""


class InvalidEntryError(ValueError):
    """Raised when a new entry is rejected before it is stored."""


class Subscription(Protocol):
    """Handle for a live change feed."""

    def cancel(self) -> None:
        """Stop delivering snapshots."""


class EntryRepository(Protocol):
    """Per-user key-value store for diary entries."""

    def fetch_all(self, user_id: UUID, collection: Collection) -> Snapshot:
        """Return all records of a collection keyed by id, in insertion order."""

    def append(
        self, user_id: UUID, collection: Collection, record: dict[str, object]
    ) -> str:
        """Insert a record and return the id minted for it."""

    def update(
        self,
        user_id: UUID,
        collection: Collection,
        entry_id: str,
        partial: dict[str, object],
    ) -> None:
        """Merge fields into an existing record."""

    def delete(self, user_id: UUID, collection: Collection, entry_id: str) -> None:
        """Remove a record."""

    def subscribe(
        self,
        user_id: UUID,
        collection: Collection,
        on_change: Callable[[Snapshot], None],
    ) -> Subscription:
        """Call `on_change` with a fresh snapshot whenever the collection changes."""


@dataclass
class EntryService:
    """Service for adding and reading raw diary entries."""

    repository: EntryRepository

    def log_food(
        self,
        user_id: UUID,
        record: dict[str, object],
        timestamp_ms: int | None = None,
    ) -> str:
        """Store a food record stamped with the given or current time."""
        product_name = str(record.get("product_name") or "").strip()
        if not product_name:
            raise InvalidEntryError("Product name is required")
        payload = dict(record)
        payload.pop("id", None)
        payload["product_name"] = product_name
        payload["timestamp_ms"] = (
            timestamp_ms if timestamp_ms is not None else _now_ms()
        )
        entry_id = self.repository.append(user_id, Collection.FOOD_LOGS, payload)
        _logger.info("Food entry logged: user_id=%s entry_id=%s", user_id, entry_id)
        return entry_id

    def log_water(
        self, user_id: UUID, amount_liters: float, timestamp_ms: int | None = None
    ) -> str:
        """Store a water record; the amount must be a positive number."""
        amount = to_float(amount_liters)
        if amount <= 0:
            raise InvalidEntryError("Water amount must be a positive number")
        entry_id = self.repository.append(
            user_id,
            Collection.WATER_LOGS,
            {
                "amount": amount,
                "timestamp_ms": timestamp_ms
                if timestamp_ms is not None
                else _now_ms(),
            },
        )
        _logger.info("Water entry logged: user_id=%s entry_id=%s", user_id, entry_id)
        return entry_id

    def list_food(self, user_id: UUID) -> list[FoodEntry]:
        """Return all food entries in store order."""
        snapshot = self.repository.fetch_all(user_id, Collection.FOOD_LOGS)
        return parse_food_entries(snapshot)

    def food_history(self, user_id: UUID) -> list[FoodEntry]:
        """Return all food entries, newest first."""
        return sorted(
            self.list_food(user_id),
            key=lambda entry: entry.timestamp_ms,
            reverse=True,
        )

    def get_food_record(self, user_id: UUID, entry_id: str) -> dict[str, object]:
        """Return the full stored record of a food entry, including scan data."""
        snapshot = self.repository.fetch_all(user_id, Collection.FOOD_LOGS)
        record = snapshot.get(entry_id)
        if record is None:
            raise EntryNotFoundError(f"Food entry {entry_id} not found")
        return record

    def list_water(self, user_id: UUID) -> list[WaterEntry]:
        """Return all water entries in store order."""
        snapshot = self.repository.fetch_all(user_id, Collection.WATER_LOGS)
        return parse_water_entries(snapshot)


def parse_food_entries(snapshot: Snapshot) -> list[FoodEntry]:
    """Convert stored food records into entries."""
    return [parse_food_entry(key, record) for key, record in snapshot.items()]


def parse_water_entries(snapshot: Snapshot) -> list[WaterEntry]:
    """Convert stored water records into entries."""
    return [parse_water_entry(key, record) for key, record in snapshot.items()]


def parse_food_entry(entry_id: str, record: dict[str, object]) -> FoodEntry:
    """Build a food entry; malformed numeric fields become 0."""
    image_ref = record.get("image_ref")
    return FoodEntry(
        id=entry_id,
        timestamp_ms=int(to_float(record.get("timestamp_ms"))),
        product_name=str(record.get("product_name") or ""),
        calories_kcal=to_float(record.get("calories")),
        protein_grams=to_float(record.get("protein")),
        carb_grams=to_float(record.get("carbohydrates")),
        fat_grams=to_float(record.get("total_fat")),
        sugar_grams=_sugar_grams(record.get("sugar")),
        vegetarian_status=str(record.get("vegetarian_status") or "Unclear"),
        image_ref=str(image_ref) if image_ref else None,
    )


def parse_water_entry(entry_id: str, record: dict[str, object]) -> WaterEntry:
    """Build a water entry; a malformed amount becomes 0."""
    return WaterEntry(
        id=entry_id,
        timestamp_ms=int(to_float(record.get("timestamp_ms"))),
        amount_liters=to_float(record.get("amount")),
    )


def _sugar_grams(value: object) -> float:
    # Scanned entries keep the full sugar breakdown.
    if isinstance(value, dict):
        return to_float(value.get("label_sugar"))
    return to_float(value)


def _now_ms() -> int:
    return int(datetime.now(tz=UTC).timestamp() * 1000)
