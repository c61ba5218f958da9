from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Status stored for one student in one class session."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"


class EntityKind(str, Enum):
    """Entities that receive a persistent presentation color."""

    SUBJECT = "SUBJECT"
    NOTICE = "NOTICE"


class Weekday(int, Enum):
    """Timetable day numbering (Monday=1 .. Saturday=6)."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def from_date(cls, value) -> "Weekday | None":
        """Map a calendar date to its timetable day; Sunday has no timetable."""

        iso = value.isoweekday()
        if iso == 7:
            return None
        return cls(iso)
