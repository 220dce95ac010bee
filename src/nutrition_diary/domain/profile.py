"""Domain models for user profiles and daily targets."""

from dataclasses import dataclass, field
from enum import StrEnum


class Sex(StrEnum):
    """Biological sex used by the BMR equation."""

    MALE = "Male"
    FEMALE = "Female"


class Goal(StrEnum):
    """Health goal selected during onboarding."""

    GENERAL_HEALTH = "General Health"
    WEIGHT_LOSS = "Weight Loss"
    MUSCLE_GAIN = "Muscle Gain"
    HEART_HEALTH = "Heart Health"
    DIABETES_CONTROL = "Diabetes Control"


@dataclass(frozen=True)
class UserProfile:
    """Snapshot of the profile fields that drive target calculation."""

    age: float | None = None
    weight_kg: float | None = None
    height_cm: float | None = None
    sex: Sex = Sex.FEMALE
    diet_tags: frozenset[str] = field(default_factory=frozenset)
    goal: Goal | None = None


@dataclass(frozen=True)
class NutrientTargets:
    """Daily calorie and protein targets."""

    calories_kcal: int
    protein_grams: int

    def to_record(self) -> dict[str, int]:
        """Return the stored `calculated_limits` shape."""
        return {"calories": self.calories_kcal, "protein": self.protein_grams}
