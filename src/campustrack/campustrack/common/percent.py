from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves toward +infinity (2.5 -> 3, -2.5 -> -2), unlike round()'s banker's rounding."""

    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def attendance_percentage(present: int, total: int) -> int:
    """Whole-number percentage; an empty denominator is 0%, not an error."""

    if total <= 0:
        return 0
    return int(round_half_up(100 * present / total))


def attendance_rate(present: int, total: int) -> float:
    """Unrounded percentage, 0.0 for an empty denominator."""

    if total <= 0:
        return 0.0
    return 100 * present / total
