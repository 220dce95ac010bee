"""Pydantic models for API payloads."""

import math
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from nutrition_diary.domain.analysis import LabelAnalysis


class FoodEntryIn(BaseModel):
    """Manually entered food item."""

    product_name: str
    calories: float = Field(default=0.0, ge=0.0)
    protein: float = Field(default=0.0, ge=0.0)
    carbohydrates: float = Field(default=0.0, ge=0.0)
    total_fat: float = Field(default=0.0, ge=0.0)
    sugar: float = Field(default=0.0, ge=0.0)
    vegetarian_status: str = "Unclear"
    image_ref: str | None = None
    timestamp_ms: int | None = None


class WaterEntryIn(BaseModel):
    """Water intake in liters."""

    amount_liters: float
    timestamp_ms: int | None = None


class ProfileUpdate(BaseModel):
    """Profile fields that drive target calculation."""

    diet: list[str] | None = None
    goal: str | None = None
    age: float | None = None
    weight: float | None = None
    height: float | None = None
    gender: str | None = None
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    def to_settings(self) -> dict[str, object]:
        """Return the stored settings shape; numbers are kept as strings."""
        fields = self.model_dump(exclude_none=True)
        for key in ("age", "weight", "height"):
            if key in fields:
                fields[key] = _format_number(fields[key])
        return fields


class SavedScan(LabelAnalysis):
    """Reviewed analysis plus a reference to the scanned image."""

    image_ref: str | None = None


def _format_number(value: float) -> str:
    # Whole numbers are stored without a trailing ".0"; others keep every digit.
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)
