"""Priority-ordered rules that pick one insight for the day."""

from datetime import datetime

from nutrition_diary.domain.entries import DailySummary
from nutrition_diary.domain.insights import Insight, InsightKind, Severity
from nutrition_diary.domain.profile import NutrientTargets

DEFAULT_WATER_GOAL_LITERS = 3.0
HYDRATION_CHECK_AFTER_HOUR = 14

OVER_GOAL = Insight(
    kind=InsightKind.OVER_GOAL,
    message="You've exceeded your goal. Try a lighter meal next.",
    severity=Severity.HIGH,
    color="#ef4444",
    icon="warning",
)
PROTEIN_LAGGING = Insight(
    kind=InsightKind.PROTEIN_LAGGING,
    message="Protein is lagging. Prioritize protein in your next meal.",
    severity=Severity.MEDIUM,
    color="#f59e0b",
    icon="fitness-center",
)
HYDRATION = Insight(
    kind=InsightKind.HYDRATION,
    message="Hydration check! Grab a glass of water.",
    severity=Severity.MEDIUM,
    color="#3b82f6",
    icon="local-drink",
)
ON_TRACK = Insight(
    kind=InsightKind.ON_TRACK,
    message="You're doing great! Keep tracking.",
    severity=Severity.INFO,
    color="#10b981",
    icon="thumb-up",
)


def derive_insight(
    summary: DailySummary,
    targets: NutrientTargets,
    now: datetime,
    water_goal_liters: float = DEFAULT_WATER_GOAL_LITERS,
) -> Insight | None:
    """Return the first matching insight, or None.

    `now` must be expressed in the user's local timezone.
    """
    if summary.entry_count == 0:
        return None
    calories = summary.total_calories_kcal
    if calories > targets.calories_kcal * 1.1:
        return OVER_GOAL
    if (
        summary.total_protein_grams < targets.protein_grams * 0.5
        and calories > targets.calories_kcal * 0.5
    ):
        return PROTEIN_LAGGING
    if (
        summary.total_water_liters < water_goal_liters / 2
        and now.hour > HYDRATION_CHECK_AFTER_HOUR
    ):
        return HYDRATION
    if calories > 0:
        return ON_TRACK
    return None
