"""Models for label analysis results."""

from pydantic import BaseModel, Field


class SugarBreakdown(BaseModel):
    """Sugar details read from the label and ingredient list."""

    label_sugar: float = Field(default=0.0, ge=0.0)
    estimated_total_sugar: str = "Unknown"
    hidden_sugars: list[str] = Field(default_factory=list)
    sugar_comment: str = "Unknown"


class IngredientConcern(BaseModel):
    """A flagged preservative or additive."""

    name: str
    concern: str


class LabelAnalysis(BaseModel):
    """Structured output for a scanned nutrition label."""

    product_name: str
    vegetarian_status: str = "Unclear"
    health_score: int = Field(default=0, ge=0, le=100)
    health_insight: str = "Unknown"
    serving_description: str = "Unknown"
    calories: float = Field(default=0.0, ge=0.0)
    protein: float = Field(default=0.0, ge=0.0)
    carbohydrates: float = Field(default=0.0, ge=0.0)
    total_fat: float = Field(default=0.0, ge=0.0)
    sugar: SugarBreakdown = Field(default_factory=SugarBreakdown)
    preservatives: list[IngredientConcern] = Field(default_factory=list)
    additives: list[IngredientConcern] = Field(default_factory=list)
