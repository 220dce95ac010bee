"""Supabase repository for diary entries."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from nutrition_diary.domain.entries import Collection
from nutrition_diary.services.entries import (
    EntryRepository,
    RepositoryUnavailableError,
    Snapshot,
)

_TABLES = {
    Collection.FOOD_LOGS: "food_logs",
    Collection.WATER_LOGS: "water_logs",
}

_logger = logging.getLogger(__name__)


@dataclass
class PollingSubscription:
    """Change feed backed by a polling task."""

    task: "asyncio.Task[None]"

    def cancel(self) -> None:
        """Stop the polling task."""
        self.task.cancel()


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for food and water logs.

    Each row holds the entry fields in a `record` JSON column.
    """

    client: Client
    poll_interval_seconds: float = 2.0

    def fetch_all(self, user_id: UUID, collection: Collection) -> Snapshot:
        """Return all entries of a collection in insertion order."""
        response = _execute(
            self.client.table(_table(collection))
            .select("id, record")
            .eq("user_id", str(user_id))
            .order("created_at", desc=False),
            action=f"fetch {collection}",
        )
        return {
            str(row["id"]): dict(row.get("record") or {})
            for row in response.data or []
        }

    def append(
        self, user_id: UUID, collection: Collection, record: dict[str, object]
    ) -> str:
        """Insert an entry row and return its id."""
        response = _execute(
            self.client.table(_table(collection)).insert(
                {"user_id": str(user_id), "record": record}
            ),
            action=f"append {collection}",
        )
        if not response.data:
            raise RepositoryUnavailableError(f"Failed to create {collection} entry")
        return str(response.data[0]["id"])

    def update(
        self,
        user_id: UUID,
        collection: Collection,
        entry_id: str,
        partial: dict[str, object],
    ) -> None:
        """Merge fields into an entry's record."""
        table = _table(collection)
        response = _execute(
            self.client.table(table)
            .select("record")
            .eq("user_id", str(user_id))
            .eq("id", entry_id)
            .limit(1),
            action=f"read {collection}",
        )
        current = dict(response.data[0].get("record") or {}) if response.data else {}
        _execute(
            self.client.table(table)
            .update({"record": {**current, **partial}})
            .eq("user_id", str(user_id))
            .eq("id", entry_id),
            action=f"update {collection}",
        )

    def delete(self, user_id: UUID, collection: Collection, entry_id: str) -> None:
        """Delete an entry row."""
        _execute(
            self.client.table(_table(collection))
            .delete()
            .eq("user_id", str(user_id))
            .eq("id", entry_id),
            action=f"delete {collection}",
        )

    def subscribe(
        self,
        user_id: UUID,
        collection: Collection,
        on_change: Callable[[Snapshot], None],
    ) -> PollingSubscription:
        """Poll the collection and report every changed snapshot.

        Must be called from a running event loop.
        """
        task = asyncio.get_running_loop().create_task(
            self._poll(user_id, collection, on_change)
        )
        return PollingSubscription(task=task)

    async def _poll(
        self,
        user_id: UUID,
        collection: Collection,
        on_change: Callable[[Snapshot], None],
    ) -> None:
        previous: Snapshot | None = None
        while True:
            try:
                snapshot = await asyncio.to_thread(self.fetch_all, user_id, collection)
            except RepositoryUnavailableError as exc:
                _logger.warning(
                    "Polling %s failed for user_id=%s: %s", collection, user_id, exc
                )
            else:
                if snapshot != previous:
                    previous = snapshot
                    on_change(snapshot)
            await asyncio.sleep(self.poll_interval_seconds)


def _table(collection: Collection) -> str:
    try:
        return _TABLES[collection]
    except KeyError:
        raise ValueError(f"Unsupported entry collection: {collection}") from None


def _execute(query, *, action: str):  # type: ignore[no-untyped-def]
    """Run a Supabase query, reporting store failures uniformly."""
    try:
        return query.execute()
    except (APIError, httpx.HTTPError) as exc:
        raise RepositoryUnavailableError(f"Supabase {action} failed: {exc}") from exc
