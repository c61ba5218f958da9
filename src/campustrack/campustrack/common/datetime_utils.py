from __future__ import annotations

from datetime import date, datetime, timedelta

from ..core.exceptions import InvalidRangeError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise InvalidRangeError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def today_local() -> date:
    """Current local calendar day.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now().date()


def trailing_window(end: date, days: int) -> tuple[date, date]:
    """Inclusive window [end - days, end]."""
    if days < 0:
        raise InvalidRangeError("Window length must not be negative")
    return end - timedelta(days=days), end


def half_open(start: date, end_exclusive: date) -> tuple[date, date]:
    """Turn [start, end) into the inclusive pair the store queries with."""
    if end_exclusive < start:
        raise InvalidRangeError("Window end is before its start")
    return start, end_exclusive - timedelta(days=1)


def month_bounds(anchor: date, months_back: int) -> tuple[date, date]:
    """First and last day of the calendar month `months_back` months before `anchor`."""
    month_index = anchor.year * 12 + (anchor.month - 1) - months_back
    year, month = divmod(month_index, 12)
    first = date(year, month + 1, 1)
    if month == 11:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 2, 1)
    return first, next_first - timedelta(days=1)
