"""Daily target calculation and profile settings."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_diary.domain.numbers import round_int, to_float
from nutrition_diary.domain.profile import Goal, NutrientTargets, Sex, UserProfile

MIN_CALORIES = 1200
ACTIVITY_FACTOR = 1.2
DEFAULT_TARGETS = NutrientTargets(calories_kcal=2000, protein_grams=50)

_GOAL_TARGETS = {
    Goal.MUSCLE_GAIN: NutrientTargets(calories_kcal=2800, protein_grams=120),
    Goal.WEIGHT_LOSS: NutrientTargets(calories_kcal=1800, protein_grams=90),
    Goal.HEART_HEALTH: NutrientTargets(calories_kcal=2000, protein_grams=60),
    Goal.DIABETES_CONTROL: NutrientTargets(calories_kcal=1900, protein_grams=70),
}
_GENERAL_TARGETS = NutrientTargets(calories_kcal=2200, protein_grams=50)

_PROFILE_FIELDS = ("diet", "goal", "age", "weight", "height", "gender", "timezone")

_logger = logging.getLogger(__name__)


class SettingsRepository(Protocol):
    """Persistence interface for the per-user settings record."""

    def get_settings(self, user_id: UUID) -> dict[str, object] | None:
        """Return the stored settings record, if any."""

    def update_settings(self, user_id: UUID, partial: dict[str, object]) -> None:
        """Merge fields into the settings record, creating it when missing."""


def compute_targets(profile: UserProfile) -> NutrientTargets:
    """Return calorie and protein targets using the Mifflin-St Jeor equation.

    Missing or non-positive age, weight or height never raise: the goal table
    is used when a goal is known, otherwise a fixed default.
    """
    if not _is_positive(profile.age, profile.weight_kg, profile.height_cm):
        if profile.goal is None:
            return DEFAULT_TARGETS
        return recommended_targets(profile.goal)

    weight = profile.weight_kg
    bmr = 10 * weight + 6.25 * profile.height_cm - 5 * profile.age
    bmr += 5 if profile.sex == Sex.MALE else -161
    calories = round_int(bmr * ACTIVITY_FACTOR)
    protein = round_int(weight * 0.8)

    if profile.goal == Goal.WEIGHT_LOSS:
        calories -= 500
        protein = round_int(weight * 1.5)
    elif profile.goal == Goal.MUSCLE_GAIN:
        calories += 300
        protein = round_int(weight * 1.8)
    elif profile.goal in {Goal.HEART_HEALTH, Goal.DIABETES_CONTROL}:
        protein = round_int(weight * 1.0)

    return NutrientTargets(
        calories_kcal=max(calories, MIN_CALORIES), protein_grams=protein
    )


def recommended_targets(goal: Goal | None) -> NutrientTargets:
    """Return goal-based estimates used when the profile is incomplete."""
    if goal is None:
        return _GENERAL_TARGETS
    return _GOAL_TARGETS.get(goal, _GENERAL_TARGETS)


def profile_from_settings(record: dict[str, object]) -> UserProfile:
    """Parse a stored settings record into a profile."""
    diet = record.get("diet") or []
    if isinstance(diet, str):
        diet = [diet]
    return UserProfile(
        age=_positive_or_none(record.get("age")),
        weight_kg=_positive_or_none(record.get("weight")),
        height_cm=_positive_or_none(record.get("height")),
        sex=parse_sex(record.get("gender")),
        diet_tags=frozenset(str(tag) for tag in diet),
        goal=parse_goal(record.get("goal")),
    )


def parse_goal(value: object) -> Goal | None:
    """Parse a goal label, accepting both "Weight Loss" and "WeightLoss"."""
    if not isinstance(value, str):
        return None
    normalized = value.replace(" ", "").replace("_", "").lower()
    for goal in Goal:
        if goal.value.replace(" ", "").lower() == normalized:
            return goal
    return None


def parse_sex(value: object) -> Sex:
    """Parse a stored gender label; anything but male uses the female constant."""
    if isinstance(value, str) and value.strip().lower() in {"male", "m"}:
        return Sex.MALE
    return Sex.FEMALE


@dataclass
class TargetService:
    """Service that keeps stored targets in sync with the profile."""

    repository: SettingsRepository
    default_timezone: str = "UTC"

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Return the stored profile, empty when the user has no settings."""
        return profile_from_settings(self.get_settings(user_id))

    def get_targets(self, user_id: UUID) -> NutrientTargets:
        """Return stored targets, falling back to goal estimates or defaults."""
        return resolve_targets(self.repository.get_settings(user_id))

    def get_timezone(self, user_id: UUID) -> str:
        """Return the user timezone or the configured default."""
        return self.timezone_from(self.get_settings(user_id))

    def get_settings(self, user_id: UUID) -> dict[str, object]:
        """Return the stored settings record, empty when there is none."""
        return self.repository.get_settings(user_id) or {}

    def timezone_from(self, settings: dict[str, object]) -> str:
        """Return the timezone of a settings record or the configured default."""
        timezone = settings.get("timezone")
        return str(timezone) if timezone else self.default_timezone

    def update_profile(
        self, user_id: UUID, fields: dict[str, object]
    ) -> NutrientTargets:
        """Merge profile fields, recompute targets and persist both."""
        current = self.get_settings(user_id)
        changes = {key: fields[key] for key in _PROFILE_FIELDS if key in fields}
        merged = {**current, **changes}
        targets = compute_targets(profile_from_settings(merged))
        self.repository.update_settings(
            user_id, {**changes, "calculated_limits": targets.to_record()}
        )
        _logger.info(
            "Targets recalculated: user_id=%s calories=%s protein=%s",
            user_id,
            targets.calories_kcal,
            targets.protein_grams,
        )
        return targets


def resolve_targets(settings: dict[str, object] | None) -> NutrientTargets:
    """Pick targets from a settings record the way the diary screens do."""
    if not settings:
        return DEFAULT_TARGETS
    fallback = (
        recommended_targets(parse_goal(settings.get("goal")))
        if settings.get("goal")
        else DEFAULT_TARGETS
    )
    limits = settings.get("calculated_limits")
    if not isinstance(limits, dict):
        return fallback
    # Unusable stored limits degrade to the fallback, never below the floor.
    calories = round_int(to_float(limits.get("calories")))
    if calories <= 0:
        return fallback
    protein = round_int(to_float(limits.get("protein")))
    return NutrientTargets(
        calories_kcal=max(calories, MIN_CALORIES),
        protein_grams=protein if protein > 0 else fallback.protein_grams,
    )


def _is_positive(*values: float | None) -> bool:
    return all(value is not None and value > 0 for value in values)


def _positive_or_none(value: object) -> float | None:
    parsed = to_float(value)
    return parsed if parsed > 0 else None
