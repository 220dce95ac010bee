"""Domain models for diary entries and daily aggregates."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from nutrition_diary.domain.insights import Insight
from nutrition_diary.domain.profile import NutrientTargets


class Collection(StrEnum):
    """Per-user collections held by the entry store."""

    FOOD_LOGS = "foodLogs"
    WATER_LOGS = "waterLogs"
    SETTINGS = "settings"


class MealGroup(StrEnum):
    """Meal period derived from the local hour of an entry."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACKS = "Snacks"


@dataclass(frozen=True)
class FoodEntry:
    """A logged food item."""

    id: str
    timestamp_ms: int
    product_name: str
    calories_kcal: float
    protein_grams: float = 0.0
    carb_grams: float = 0.0
    fat_grams: float = 0.0
    sugar_grams: float = 0.0
    vegetarian_status: str = "Unclear"
    image_ref: str | None = None


@dataclass(frozen=True)
class WaterEntry:
    """A logged amount of water."""

    id: str
    timestamp_ms: int
    amount_liters: float


@dataclass
class ConsolidatedItem:
    """Near-duplicate entries of one meal group shown as a single row."""

    representative: FoodEntry
    count: int
    total_calories_kcal: float
    member_ids: list[str]

    @property
    def latest_id(self) -> str:
        """Id of the most recently encountered member."""
        return self.member_ids[-1]


@dataclass(frozen=True)
class DailySummary:
    """Rounded totals for one calendar day."""

    total_calories_kcal: int
    total_protein_grams: int
    total_carb_grams: int
    total_fat_grams: int
    total_water_liters: float
    entry_count: int = 0
    avg_sugar_grams: float = 0.0


@dataclass(frozen=True)
class MealGroupView:
    """Entries of one meal group with their consolidated rows."""

    group: MealGroup
    entries: list[FoodEntry]
    items: list[ConsolidatedItem]
    total_calories_kcal: int


@dataclass(frozen=True)
class Progress:
    """Fraction of each daily goal reached, capped at 1.0."""

    calories: float
    protein: float
    water: float


@dataclass(frozen=True)
class DiaryDay:
    """Everything the diary shows for a single day."""

    day: date
    summary: DailySummary
    targets: NutrientTargets
    water_goal_liters: float
    meals: list[MealGroupView] = field(default_factory=list)
    insight: Insight | None = None
    progress: Progress | None = None
