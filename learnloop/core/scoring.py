"""Small numeric helpers shared by the analytics modules."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5 + 1e-9)


def percent(part: float, whole: float) -> int:
    """Integer percentage of part/whole, 0 when whole is empty."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def ratio(part: float, whole: float) -> float:
    """part/whole guarded against empty denominators."""
    return part / max(whole, 1)


def weighted_mean(pairs: list[tuple[float, float]]) -> float | None:
    """
    Weight-normalized mean of (value, weight) pairs.

    Returns None when the weights sum to zero so callers can tell
    "no data" apart from a real zero.
    """
    total_weight = math.fsum(weight for _, weight in pairs)
    if total_weight <= 0:
        return None
    return math.fsum(value * weight for value, weight in pairs) / total_weight
