"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from nutrition_diary.api.models import (
    FoodEntryIn,
    ProfileUpdate,
    SavedScan,
    WaterEntryIn,
)
from nutrition_diary.app_logging import configure_logging
from nutrition_diary.containers import AppContainer
from nutrition_diary.domain.entries import (
    Collection,
    ConsolidatedItem,
    DiaryDay,
    FoodEntry,
    MealGroupView,
)
from nutrition_diary.domain.profile import NutrientTargets
from nutrition_diary.services.analysis import (
    AnalysisFailedError,
    AnalysisQuotaExceededError,
    analysis_to_food_record,
)
from nutrition_diary.services.entries import (
    EntryNotFoundError,
    InvalidEntryError,
    RepositoryUnavailableError,
)

_COLLECTIONS = {"food": Collection.FOOD_LOGS, "water": Collection.WATER_LOGS}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(RepositoryUnavailableError)
    async def repository_unavailable(
        request: Request, exc: RepositoryUnavailableError
    ) -> JSONResponse:
        logger.exception("Entry store unavailable", extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage is unavailable. Please try again."},
        )

    @app.exception_handler(EntryNotFoundError)
    async def entry_not_found(
        request: Request, exc: EntryNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(InvalidEntryError)
    async def invalid_entry(request: Request, exc: InvalidEntryError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(AnalysisFailedError)
    async def analysis_failed(
        request: Request, exc: AnalysisFailedError
    ) -> JSONResponse:
        if isinstance(exc, AnalysisQuotaExceededError):
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "detail": "You are scanning too fast! Please wait a moment."
                },
            )
        logger.warning("Label analysis failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": "Could not analyze image. Please try again."},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/users/{user_id}/diary")
    async def diary(
        user_id: UUID, request: Request, day: date | None = None
    ) -> dict[str, object]:
        """Return the diary view for a day (today by default)."""
        state_container: AppContainer = request.app.state.container
        return _serialize_day(state_container.diary_service.get_day(user_id, day))

    @app.get("/users/{user_id}/history")
    async def history(user_id: UUID, request: Request) -> list[dict[str, object]]:
        """Return every food entry, newest first."""
        state_container: AppContainer = request.app.state.container
        return [
            _serialize_entry(entry)
            for entry in state_container.entry_service.food_history(user_id)
        ]

    @app.get("/users/{user_id}/food/{entry_id}")
    async def food_record(
        user_id: UUID, entry_id: str, request: Request
    ) -> dict[str, object]:
        """Return the full stored record of a food entry, e.g. a saved scan."""
        state_container: AppContainer = request.app.state.container
        record = state_container.entry_service.get_food_record(user_id, entry_id)
        return {"id": entry_id, **record}

    @app.post("/users/{user_id}/food", status_code=status.HTTP_201_CREATED)
    async def add_food(
        user_id: UUID, payload: FoodEntryIn, request: Request
    ) -> dict[str, str]:
        """Log a manually entered food item."""
        state_container: AppContainer = request.app.state.container
        record = payload.model_dump(exclude={"timestamp_ms"})
        entry_id = state_container.entry_service.log_food(
            user_id, record, timestamp_ms=payload.timestamp_ms
        )
        return {"id": entry_id}

    @app.post("/users/{user_id}/water", status_code=status.HTTP_201_CREATED)
    async def add_water(
        user_id: UUID, payload: WaterEntryIn, request: Request
    ) -> dict[str, str]:
        """Log water intake."""
        state_container: AppContainer = request.app.state.container
        entry_id = state_container.entry_service.log_water(
            user_id, payload.amount_liters, timestamp_ms=payload.timestamp_ms
        )
        return {"id": entry_id}

    @app.delete("/users/{user_id}/{kind}/{entry_id}")
    async def delete_entry(
        user_id: UUID, kind: str, entry_id: str, request: Request
    ) -> dict[str, str]:
        """Delete an entry and open its undo window."""
        collection = _COLLECTIONS.get(kind)
        if collection is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        state_container: AppContainer = request.app.state.container
        deleted = state_container.ledger.delete(user_id, entry_id, collection)
        return {
            "status": "deleted",
            "undo_expires_at": deleted.expires_at.isoformat(),
        }

    @app.post("/users/{user_id}/undo")
    async def undo(user_id: UUID, request: Request) -> dict[str, str | None]:
        """Restore the most recent deletion while its undo window is open."""
        state_container: AppContainer = request.app.state.container
        restored_id = state_container.ledger.undo(user_id)
        if restored_id is None:
            return {"status": "expired", "id": None}
        return {"status": "restored", "id": restored_id}

    @app.get("/users/{user_id}/targets")
    async def targets(user_id: UUID, request: Request) -> dict[str, int]:
        """Return the user's daily targets."""
        state_container: AppContainer = request.app.state.container
        return _serialize_targets(state_container.target_service.get_targets(user_id))

    @app.put("/users/{user_id}/profile")
    async def update_profile(
        user_id: UUID, payload: ProfileUpdate, request: Request
    ) -> dict[str, int]:
        """Save profile fields and return the recalculated targets."""
        state_container: AppContainer = request.app.state.container
        updated = state_container.target_service.update_profile(
            user_id, payload.to_settings()
        )
        return _serialize_targets(updated)

    @app.post("/users/{user_id}/scan")
    async def scan(user_id: UUID, request: Request) -> dict[str, object]:
        """Analyze a raw label image sent as the request body."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(
                status_code=422,
                detail="Image body is required",
            )
        profile = state_container.target_service.get_profile(user_id)
        analysis = await state_container.analysis_service.analyze(image_bytes, profile)
        return analysis.model_dump()

    @app.post("/users/{user_id}/scan/save", status_code=status.HTTP_201_CREATED)
    async def save_scan(
        user_id: UUID, payload: SavedScan, request: Request
    ) -> dict[str, str]:
        """Store a reviewed analysis, with its image reference, as a food entry."""
        state_container: AppContainer = request.app.state.container
        entry_id = state_container.entry_service.log_food(
            user_id, analysis_to_food_record(payload, image_ref=payload.image_ref)
        )
        return {"id": entry_id}

    return app


def _serialize_targets(targets: NutrientTargets) -> dict[str, int]:
    return {"calories": targets.calories_kcal, "protein": targets.protein_grams}


def _serialize_day(day: DiaryDay) -> dict[str, object]:
    summary = day.summary
    insight = day.insight
    progress = day.progress
    return {
        "day": day.day.isoformat(),
        "summary": {
            "total_calories": summary.total_calories_kcal,
            "total_protein": summary.total_protein_grams,
            "total_carbs": summary.total_carb_grams,
            "total_fat": summary.total_fat_grams,
            "total_water": summary.total_water_liters,
            "entry_count": summary.entry_count,
            "avg_sugar": summary.avg_sugar_grams,
        },
        "targets": _serialize_targets(day.targets),
        "water_goal": day.water_goal_liters,
        "insight": {
            "kind": insight.kind,
            "text": insight.message,
            "severity": insight.severity,
            "color": insight.color,
            "icon": insight.icon,
        }
        if insight
        else None,
        "progress": {
            "calories": progress.calories,
            "protein": progress.protein,
            "water": progress.water,
        }
        if progress
        else None,
        "meals": [_serialize_meal(meal) for meal in day.meals],
    }


def _serialize_meal(meal: MealGroupView) -> dict[str, object]:
    return {
        "group": meal.group,
        "entry_count": len(meal.entries),
        "total_calories": meal.total_calories_kcal,
        "items": [_serialize_item(item) for item in meal.items],
    }


def _serialize_item(item: ConsolidatedItem) -> dict[str, object]:
    return {
        **_serialize_entry(item.representative),
        "count": item.count,
        "total_calories": item.total_calories_kcal,
        "ids": item.member_ids,
        "delete_id": item.latest_id,
    }


def _serialize_entry(entry: FoodEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "timestamp_ms": entry.timestamp_ms,
        "product_name": entry.product_name,
        "calories": entry.calories_kcal,
        "protein": entry.protein_grams,
        "carbohydrates": entry.carb_grams,
        "total_fat": entry.fat_grams,
        "sugar": entry.sugar_grams,
        "vegetarian_status": entry.vegetarian_status,
        "image_ref": entry.image_ref,
    }
