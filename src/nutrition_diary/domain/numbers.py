"""Numeric helpers shared by the diary calculations."""

import math


def to_float(value: object) -> float:
    """Coerce a stored numeric field to float, degrading to 0.0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        try:
            parsed = float(value)
        except OverflowError:
            return 0.0
        return parsed if math.isfinite(parsed) else 0.0
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return 0.0
        return parsed if math.isfinite(parsed) else 0.0
    return 0.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, matching client-side rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round half-up to an integer."""
    return int(math.floor(value + 0.5))
