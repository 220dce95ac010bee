"""Nutrition label analysis using LLMs."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutrition_diary.domain.analysis import LabelAnalysis
from nutrition_diary.domain.profile import Goal, UserProfile

_CONCERN_SCHEMA: dict[str, object] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "concern": {"type": "string"},
        },
        "required": ["name", "concern"],
        "additionalProperties": False,
    },
}

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "product_name": {"type": "string"},
        "vegetarian_status": {
            "type": "string",
            "enum": ["Vegetarian", "Non-Vegetarian", "Vegan", "Unclear"],
        },
        "health_score": {"type": "integer", "minimum": 0, "maximum": 100},
        "health_insight": {"type": "string"},
        "serving_description": {"type": "string"},
        "calories": {"type": "number", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "carbohydrates": {"type": "number", "minimum": 0},
        "total_fat": {"type": "number", "minimum": 0},
        "sugar": {
            "type": "object",
            "properties": {
                "label_sugar": {"type": "number", "minimum": 0},
                "estimated_total_sugar": {"type": "string"},
                "hidden_sugars": {"type": "array", "items": {"type": "string"}},
                "sugar_comment": {"type": "string"},
            },
            "required": [
                "label_sugar",
                "estimated_total_sugar",
                "hidden_sugars",
                "sugar_comment",
            ],
            "additionalProperties": False,
        },
        "preservatives": _CONCERN_SCHEMA,
        "additives": _CONCERN_SCHEMA,
    },
    "required": [
        "product_name",
        "vegetarian_status",
        "health_score",
        "health_insight",
        "serving_description",
        "calories",
        "protein",
        "carbohydrates",
        "total_fat",
        "sugar",
        "preservatives",
        "additives",
    ],
    "additionalProperties": False,
}

_logger = logging.getLogger(__name__)


class AnalysisFailedError(RuntimeError):
    """Raised when a label could not be analyzed."""


class AnalysisQuotaExceededError(AnalysisFailedError):
    """Raised when the analysis provider is rate limiting requests."""


class AnalysisClient(Protocol):
    """Interface for LLM label analysis."""

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured analysis data."""


@dataclass
class AnalysisService:
    """Service that prepares label prompts and validates results."""

    client: AnalysisClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(
        self, image_bytes: bytes, profile: UserProfile | None = None
    ) -> LabelAnalysis:
        """Analyze a label photo, personalised to the user's diet and goal."""
        raw = await self.client.analyze(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=ANALYSIS_SCHEMA,
            prompt=build_prompt(profile),
        )
        try:
            return LabelAnalysis.model_validate(raw)
        except ValidationError as exc:
            _logger.warning("Label analysis returned invalid data: %s", exc)
            raise AnalysisFailedError("Analysis returned invalid data") from exc


def build_prompt(profile: UserProfile | None) -> str:
    """Return the analysis prompt with the user's profile hint."""
    diet = ", ".join(sorted(profile.diet_tags)) if profile else ""
    goal = profile.goal if profile and profile.goal else Goal.GENERAL_HEALTH
    return (
        "Analyze this product's nutrition label and ingredients. "
        "Focus on sugar per serving, hidden sugars, preservatives, additives "
        "and the overall vegetarian status.\n"
        f"User diet: {diet or 'Vegetarian'}\n"
        f"User health goal: {goal}\n"
        "Prefer per-serving values over per-100 g values. "
        "Use 0 for unknown numbers and 'Unknown' for unknown text. "
        "Score health_score strictly (0-100) for this user's goal and keep "
        "health_insight to one sentence personalised to that goal."
    )


def analysis_to_food_record(
    analysis: LabelAnalysis, image_ref: str | None = None
) -> dict[str, object]:
    """Convert an analysis into a food log record that keeps every field.

    The stored record can be reopened as the full analysis later.
    """
    record = analysis.model_dump(include=set(LabelAnalysis.model_fields))
    record["image_ref"] = image_ref
    return record


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
