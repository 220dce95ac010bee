"""Domain models for daily insights."""

from dataclasses import dataclass
from enum import StrEnum


class InsightKind(StrEnum):
    """Rule that produced an insight."""

    OVER_GOAL = "over_goal"
    PROTEIN_LAGGING = "protein_lagging"
    HYDRATION = "hydration"
    ON_TRACK = "on_track"


class Severity(StrEnum):
    """How urgently an insight should be surfaced."""

    HIGH = "high"
    MEDIUM = "medium"
    INFO = "info"


@dataclass(frozen=True)
class Insight:
    """A single actionable message for the day."""

    kind: InsightKind
    message: str
    severity: Severity
    color: str
    icon: str
