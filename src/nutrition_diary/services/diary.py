"""Daily diary aggregation by timezone."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_diary.domain.entries import (
    Collection,
    DailySummary,
    DiaryDay,
    FoodEntry,
    MealGroup,
    MealGroupView,
    Progress,
    WaterEntry,
)
from nutrition_diary.domain.numbers import round_half_up, round_int
from nutrition_diary.domain.profile import NutrientTargets
from nutrition_diary.services.consolidation import consolidate
from nutrition_diary.services.entries import (
    EntryRepository,
    Snapshot,
    parse_food_entries,
    parse_water_entries,
)
from nutrition_diary.services.insights import DEFAULT_WATER_GOAL_LITERS, derive_insight
from nutrition_diary.services.targets import TargetService, resolve_targets

BREAKFAST_START_HOUR = 5
LUNCH_START_HOUR = 11
DINNER_START_HOUR = 16
SNACKS_START_HOUR = 22

_logger = logging.getLogger(__name__)


def day_window(day: date, tz: ZoneInfo) -> tuple[int, int]:
    """Return inclusive epoch-millisecond bounds of a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    next_start = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return _to_ms(start), _to_ms(next_start) - 1


def meal_group_for(timestamp_ms: int, tz: ZoneInfo) -> MealGroup:
    """Return the meal period for the local hour of a timestamp."""
    hour = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz).hour
    if BREAKFAST_START_HOUR <= hour < LUNCH_START_HOUR:
        return MealGroup.BREAKFAST
    if LUNCH_START_HOUR <= hour < DINNER_START_HOUR:
        return MealGroup.LUNCH
    if DINNER_START_HOUR <= hour < SNACKS_START_HOUR:
        return MealGroup.DINNER
    return MealGroup.SNACKS


def aggregate_day(
    entries: list[FoodEntry],
    water_entries: list[WaterEntry],
    day: date,
    tz: ZoneInfo,
) -> tuple[dict[MealGroup, list[FoodEntry]], DailySummary]:
    """Select a day's entries, bucket them by meal and sum the totals."""
    start_ms, end_ms = day_window(day, tz)
    groups: dict[MealGroup, list[FoodEntry]] = {group: [] for group in MealGroup}
    calories = protein = carbs = fat = sugar = 0.0
    count = 0
    for entry in entries:
        if not start_ms <= entry.timestamp_ms <= end_ms:
            continue
        groups[meal_group_for(entry.timestamp_ms, tz)].append(entry)
        calories += entry.calories_kcal
        protein += entry.protein_grams
        carbs += entry.carb_grams
        fat += entry.fat_grams
        sugar += entry.sugar_grams
        count += 1

    water = sum(
        water_entry.amount_liters
        for water_entry in water_entries
        if start_ms <= water_entry.timestamp_ms <= end_ms
    )
    summary = DailySummary(
        total_calories_kcal=round_int(calories),
        total_protein_grams=round_int(protein),
        total_carb_grams=round_int(carbs),
        total_fat_grams=round_int(fat),
        total_water_liters=round_half_up(water, 1),
        entry_count=count,
        avg_sugar_grams=round_half_up(sugar / count, 1) if count else 0.0,
    )
    return groups, summary


@dataclass
class DiaryService:
    """Service that builds the diary view for one user and day."""

    entry_repository: EntryRepository
    target_service: TargetService
    water_goal_liters: float = DEFAULT_WATER_GOAL_LITERS
    clock: Callable[[ZoneInfo], datetime] | None = None

    def get_day(self, user_id: UUID, day: date | None = None) -> DiaryDay:
        """Return grouped entries, totals, targets and insight for a day."""
        settings = self.target_service.get_settings(user_id)
        tz = ZoneInfo(self.target_service.timezone_from(settings))
        food = self.entry_repository.fetch_all(user_id, Collection.FOOD_LOGS)
        water = self.entry_repository.fetch_all(user_id, Collection.WATER_LOGS)
        targets = resolve_targets(settings)
        now = self._now(tz)
        return self.build_day(food, water, targets, day or now.date(), tz, now)

    def build_day(  # noqa: PLR0913
        self,
        food: Snapshot,
        water: Snapshot,
        targets: NutrientTargets,
        day: date,
        tz: ZoneInfo,
        now: datetime,
    ) -> DiaryDay:
        """Run the full aggregation pipeline over one consistent snapshot."""
        groups, summary = aggregate_day(
            parse_food_entries(food), parse_water_entries(water), day, tz
        )
        meals = [
            MealGroupView(
                group=group,
                entries=entries,
                items=consolidate(entries),
                total_calories_kcal=round_int(
                    sum(entry.calories_kcal for entry in entries)
                ),
            )
            for group, entries in groups.items()
        ]
        return DiaryDay(
            day=day,
            summary=summary,
            targets=targets,
            water_goal_liters=self.water_goal_liters,
            meals=meals,
            insight=derive_insight(
                summary, targets, now, water_goal_liters=self.water_goal_liters
            ),
            progress=Progress(
                calories=_ratio(summary.total_calories_kcal, targets.calories_kcal),
                protein=_ratio(summary.total_protein_grams, targets.protein_grams),
                water=_ratio(summary.total_water_liters, self.water_goal_liters),
            ),
        )

    async def watch_day(
        self, user_id: UUID, day: date | None = None
    ) -> AsyncIterator[DiaryDay]:
        """Yield a fresh diary view every time the user's logs change."""
        changes: asyncio.Queue[Snapshot] = asyncio.Queue()
        subscriptions = [
            self.entry_repository.subscribe(user_id, collection, changes.put_nowait)
            for collection in (Collection.FOOD_LOGS, Collection.WATER_LOGS)
        ]
        last: DiaryDay | None = None
        try:
            while True:
                await changes.get()
                current = await asyncio.to_thread(self.get_day, user_id, day)
                if current != last:
                    last = current
                    yield current
        finally:
            for subscription in subscriptions:
                subscription.cancel()
            _logger.info("Diary watch closed: user_id=%s", user_id)

    def _now(self, tz: ZoneInfo) -> datetime:
        if self.clock is not None:
            return self.clock(tz)
        return datetime.now(tz=tz)


def _ratio(total: float, goal: float) -> float:
    if goal <= 0:
        return 0.0
    return min(total / goal, 1.0)


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)
