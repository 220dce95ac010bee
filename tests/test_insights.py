"""Tests for daily insight rules."""

from datetime import datetime
from zoneinfo import ZoneInfo

from nutrition_diary.domain.entries import DailySummary
from nutrition_diary.domain.insights import InsightKind
from nutrition_diary.domain.profile import NutrientTargets
from nutrition_diary.services.insights import (
    HYDRATION,
    ON_TRACK,
    OVER_GOAL,
    PROTEIN_LAGGING,
    derive_insight,
)

TARGETS = NutrientTargets(calories_kcal=2000, protein_grams=100)
MORNING = datetime(2024, 5, 10, 10, 0, tzinfo=ZoneInfo("Europe/Berlin"))
AFTERNOON = datetime(2024, 5, 10, 15, 0, tzinfo=ZoneInfo("Europe/Berlin"))


def _summary(
    calories: int = 0, protein: int = 0, water: float = 0.0, count: int = 1
) -> DailySummary:
    return DailySummary(
        total_calories_kcal=calories,
        total_protein_grams=protein,
        total_carb_grams=0,
        total_fat_grams=0,
        total_water_liters=water,
        entry_count=count,
    )


def test_no_insight_without_entries() -> None:
    assert derive_insight(_summary(calories=2500, count=0), TARGETS, MORNING) is None


def test_over_goal_wins() -> None:
    insight = derive_insight(_summary(calories=2300), TARGETS, AFTERNOON)

    assert insight == OVER_GOAL
    assert insight.kind == InsightKind.OVER_GOAL
    assert insight.color == "#ef4444"


def test_exactly_ten_percent_over_is_not_over_goal() -> None:
    insight = derive_insight(
        _summary(calories=2200, protein=80, water=2.0), TARGETS, AFTERNOON
    )

    assert insight == ON_TRACK


def test_protein_lagging_after_half_of_calories() -> None:
    insight = derive_insight(_summary(calories=1200, protein=40), TARGETS, MORNING)

    assert insight == PROTEIN_LAGGING


def test_low_protein_early_in_the_day_is_fine() -> None:
    insight = derive_insight(_summary(calories=900, protein=10), TARGETS, MORNING)

    assert insight == ON_TRACK


def test_hydration_only_after_two_pm() -> None:
    summary = _summary(calories=800, protein=60, water=1.0)

    assert derive_insight(summary, TARGETS, AFTERNOON) == HYDRATION
    assert derive_insight(summary, TARGETS, AFTERNOON.replace(hour=14)) == ON_TRACK


def test_hydration_respects_custom_water_goal() -> None:
    summary = _summary(calories=800, protein=60, water=1.0)

    assert (
        derive_insight(summary, TARGETS, AFTERNOON, water_goal_liters=2.0)
        == ON_TRACK
    )


def test_zero_calories_in_the_morning_has_no_insight() -> None:
    assert derive_insight(_summary(calories=0), TARGETS, MORNING) is None
