from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..core.constants import TIMETABLE_DAYS, TIMETABLE_PERIODS


@dataclass(frozen=True)
class TimetableSlot:
    """One cell coordinate of a weekly grid; at most one entry may occupy it."""

    department_id: int
    semester_id: int
    academic_year_id: int
    day_of_week: int
    period: int


@dataclass(frozen=True)
class TimetableEntry:
    entry_id: int
    slot: TimetableSlot
    subject_id: int
    faculty_id: int
    room: Optional[str] = None
    mdc_course_id: Optional[int] = None

    @property
    def is_mdc(self) -> bool:
        return self.mdc_course_id is not None

    def as_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "department_id": self.slot.department_id,
            "semester_id": self.slot.semester_id,
            "academic_year_id": self.slot.academic_year_id,
            "day_of_week": self.slot.day_of_week,
            "period": self.slot.period,
            "subject_id": self.subject_id,
            "faculty_id": self.faculty_id,
            "room": self.room,
            "is_mdc": self.is_mdc,
            "mdc_course_id": self.mdc_course_id,
        }


@dataclass(frozen=True)
class TimetableEntryView:
    """Entry joined with the names a grid shows."""

    entry: TimetableEntry
    subject_code: str = ""
    subject_name: str = ""
    faculty_name: str = ""

    def as_dict(self) -> dict:
        e = self.entry
        return {
            "entry_id": e.entry_id,
            "day_of_week": e.slot.day_of_week,
            "period": e.slot.period,
            "subject_id": e.subject_id,
            "subject_code": self.subject_code,
            "subject_name": self.subject_name,
            "faculty_id": e.faculty_id,
            "faculty_name": self.faculty_name,
            "room": e.room,
            "is_mdc": e.is_mdc,
            "mdc_course_id": e.mdc_course_id,
        }


@dataclass(frozen=True)
class SlotDraft:
    """Unsaved edit state of one slot.

    `toggle_mdc` produces a draft pre-filled from the MDC configuration; nothing
    is written until the draft is saved. `subject_id` may be None when the
    offering department has no MDC-flagged subject for that semester; the
    course name is shown instead and a subject must be picked before saving.
    """

    slot: TimetableSlot
    subject_id: Optional[int] = None
    faculty_id: Optional[int] = None
    room: Optional[str] = None
    entry_id: Optional[int] = None
    mdc_course_id: Optional[int] = None
    course_name: str = ""

    @property
    def is_mdc(self) -> bool:
        return self.mdc_course_id is not None

    def with_changes(self, **changes) -> "SlotDraft":
        return replace(self, **changes)

    def as_dict(self) -> dict:
        return {
            "department_id": self.slot.department_id,
            "semester_id": self.slot.semester_id,
            "academic_year_id": self.slot.academic_year_id,
            "day_of_week": self.slot.day_of_week,
            "period": self.slot.period,
            "entry_id": self.entry_id,
            "subject_id": self.subject_id,
            "faculty_id": self.faculty_id,
            "room": self.room,
            "is_mdc": self.is_mdc,
            "mdc_course_id": self.mdc_course_id,
            "course_name": self.course_name,
        }


@dataclass(frozen=True)
class MDCSaveResult:
    entry_id: int
    propagated: int


@dataclass(frozen=True)
class GridCell:
    day_of_week: int
    period: int
    entry: Optional[TimetableEntryView] = None
    color: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.entry is None

    def as_dict(self) -> dict:
        data = {"day_of_week": self.day_of_week, "period": self.period, "color": self.color, "entry": None}
        if self.entry is not None:
            data["entry"] = self.entry.as_dict()
        return data


@dataclass(frozen=True)
class TimetableGrid:
    """Day x period matrix (Monday..Saturday by periods 1..5)."""

    department_id: int
    semester_id: int
    academic_year_id: int
    rows: Tuple[Tuple[GridCell, ...], ...]

    def cell(self, day_of_week: int, period: int) -> GridCell:
        return self.rows[day_of_week - 1][period - 1]

    def occupied(self) -> list[GridCell]:
        return [c for row in self.rows for c in row if not c.is_empty]

    def as_dict(self) -> dict:
        return {
            "department_id": self.department_id,
            "semester_id": self.semester_id,
            "academic_year_id": self.academic_year_id,
            "days": TIMETABLE_DAYS,
            "periods": TIMETABLE_PERIODS,
            "rows": [[c.as_dict() for c in row] for row in self.rows],
        }
