"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_diary.adapters.openai_analysis_client import OpenAIAnalysisClient
from nutrition_diary.adapters.supabase_entry_repository import (
    SupabaseEntryRepository,
)
from nutrition_diary.adapters.supabase_settings_repository import (
    SupabaseSettingsRepository,
)
from nutrition_diary.config import Settings
from nutrition_diary.services.analysis import AnalysisService
from nutrition_diary.services.diary import DiaryService
from nutrition_diary.services.entries import EntryService
from nutrition_diary.services.ledger import MutationLedger
from nutrition_diary.services.targets import TargetService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    entry_service: EntryService
    target_service: TargetService
    diary_service: DiaryService
    ledger: MutationLedger
    analysis_service: AnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    entry_repository = SupabaseEntryRepository(
        supabase_client,
        poll_interval_seconds=resolved_settings.subscription_poll_seconds,
    )
    settings_repository = SupabaseSettingsRepository(supabase_client)
    target_service = TargetService(
        settings_repository,
        default_timezone=resolved_settings.default_timezone,
    )
    diary_service = DiaryService(
        entry_repository=entry_repository,
        target_service=target_service,
        water_goal_liters=resolved_settings.water_goal_liters,
    )
    ledger = MutationLedger(
        entry_repository,
        undo_window_seconds=resolved_settings.undo_window_seconds,
    )
    openai_client = OpenAIAnalysisClient.create(resolved_settings.openai_api_key)
    analysis_service = AnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await openai_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        entry_service=EntryService(entry_repository),
        target_service=target_service,
        diary_service=diary_service,
        ledger=ledger,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
