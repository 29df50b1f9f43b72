"""
Numeric helpers for scores and rates.
"""

import math
from typing import Iterable, Union

Number = Union[int, float]


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3)."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def percentage(part: Number, whole: Number) -> int:
    """Rounded ``part / whole * 100``; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def rounded_mean(values: Iterable[Number]) -> int:
    """Rounded arithmetic mean; 0 for no values."""
    values = list(values)
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))
