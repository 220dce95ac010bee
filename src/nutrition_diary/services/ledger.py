"""Deletion with a short-lived, single-level undo."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID

from nutrition_diary.domain.entries import Collection
from nutrition_diary.services.entries import EntryNotFoundError, EntryRepository

DEFAULT_UNDO_WINDOW_SECONDS = 4.0

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletedRecord:
    """Snapshot of a removed entry, minus the id the store assigned it."""

    user_id: UUID
    collection: Collection
    entry_id: str
    snapshot: dict[str, object]
    deleted_at: datetime
    expires_at: datetime


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MutationLedger:
    """Deletes entries and keeps the last deletion per user restorable.

    Each user has one pending slot. A newer delete replaces it; restore and
    expiry clear it. Restoring appends a copy, so the entry gets a new id.
    """

    repository: EntryRepository
    undo_window_seconds: float = DEFAULT_UNDO_WINDOW_SECONDS
    clock: Callable[[], datetime] = _utc_now
    _pending: dict[UUID, DeletedRecord] = field(default_factory=dict, repr=False)

    def delete(
        self,
        user_id: UUID,
        entry_id: str,
        collection: Collection = Collection.FOOD_LOGS,
    ) -> DeletedRecord:
        """Remove an entry and open an undo window for it."""
        records = self.repository.fetch_all(user_id, collection)
        record = records.get(entry_id)
        if record is None:
            raise EntryNotFoundError(f"{collection} entry {entry_id} not found")
        self.repository.delete(user_id, collection, entry_id)

        deleted_at = self.clock()
        deleted = DeletedRecord(
            user_id=user_id,
            collection=collection,
            entry_id=entry_id,
            snapshot={key: value for key, value in record.items() if key != "id"},
            deleted_at=deleted_at,
            expires_at=deleted_at + timedelta(seconds=self.undo_window_seconds),
        )
        replaced = self._pending.get(user_id)
        if replaced is not None:
            _logger.info(
                "Undo discarded by newer delete: user_id=%s entry_id=%s",
                user_id,
                replaced.entry_id,
            )
        self._pending[user_id] = deleted
        _logger.info(
            "Entry deleted: user_id=%s collection=%s entry_id=%s",
            user_id,
            collection,
            entry_id,
        )
        return deleted

    def restore(self, record: DeletedRecord) -> str | None:
        """Re-insert a deleted entry if its undo window is still open."""
        if self.pending(record.user_id) is not record:
            _logger.info(
                "Undo unavailable: user_id=%s entry_id=%s",
                record.user_id,
                record.entry_id,
            )
            return None
        new_id = self.repository.append(
            record.user_id, record.collection, dict(record.snapshot)
        )
        self._pending.pop(record.user_id, None)
        _logger.info(
            "Entry restored: user_id=%s old_id=%s new_id=%s",
            record.user_id,
            record.entry_id,
            new_id,
        )
        return new_id

    def undo(self, user_id: UUID) -> str | None:
        """Restore the user's pending deletion, if any."""
        record = self.pending(user_id)
        if record is None:
            return None
        return self.restore(record)

    def pending(self, user_id: UUID) -> DeletedRecord | None:
        """Return the restorable deletion for a user, clearing it once expired."""
        record = self._pending.get(user_id)
        if record is None:
            return None
        if self.clock() >= record.expires_at:
            self._pending.pop(user_id, None)
            return None
        return record
