"""Numeric helpers shared by the anchor and state layers."""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float | int:
    """Round like a browser's ``Math.round``: halves go up, not to even.

    ``digits == 0`` returns an ``int``.
    """

    if digits <= 0:
        return int(math.floor(value + 0.5))
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
