"""Supabase repository for user settings."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from nutrition_diary.services.entries import RepositoryUnavailableError
from nutrition_diary.services.targets import SettingsRepository

_COLUMNS = (
    "diet",
    "goal",
    "age",
    "weight",
    "height",
    "gender",
    "timezone",
    "calculated_limits",
)


@dataclass
class SupabaseSettingsRepository(SettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_settings(self, user_id: UUID) -> dict[str, object] | None:
        """Return the stored settings for a user."""
        try:
            response = (
                self.client.table("user_settings")
                .select(", ".join(_COLUMNS))
                .eq("user_id", str(user_id))
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise RepositoryUnavailableError(
                f"Supabase settings read failed: {exc}"
            ) from exc
        if not response.data:
            return None
        row = response.data[0]
        return {key: row[key] for key in _COLUMNS if row.get(key) is not None}

    def update_settings(self, user_id: UUID, partial: dict[str, object]) -> None:
        """Upsert settings fields for a user."""
        payload = {key: value for key, value in partial.items() if key in _COLUMNS}
        payload["user_id"] = str(user_id)
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        try:
            self.client.table("user_settings").upsert(
                payload, on_conflict="user_id"
            ).execute()
        except (APIError, httpx.HTTPError) as exc:
            raise RepositoryUnavailableError(
                f"Supabase settings write failed: {exc}"
            ) from exc
