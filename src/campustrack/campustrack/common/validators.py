from __future__ import annotations

from ..core.constants import TIMETABLE_DAYS, TIMETABLE_PERIODS
from ..core.exceptions import InvalidRangeError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive_id(value, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if ident <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return ident


def require_between(value, field_name: str, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < low or number > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def require_day_and_period(day_of_week, period) -> tuple[int, int]:
    return (
        require_between(day_of_week, "Day of week", 1, TIMETABLE_DAYS),
        require_between(period, "Period", 1, TIMETABLE_PERIODS),
    )


def require_count(value, field_name: str, *, minimum: int = 0) -> int:
    """Window sizes, week counts and limits."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidRangeError(f"{field_name} must be a number")
    if number < minimum:
        raise InvalidRangeError(f"{field_name} must be at least {minimum}")
    return number
