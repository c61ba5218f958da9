from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MDCSaveResult, TimetableEntry, TimetableEntryView, TimetableSlot


class TimetableRepository(Protocol):
    """Timetable entries plus the faculty-subject teaching mappings they imply.

    Every write keeps `faculty_subjects` in step within its own transaction: the
    pair of a saved entry is ensured, and a pair no entry uses any more is removed.
    """

    def get_by_id(self, entry_id: int) -> Optional[TimetableEntry]:
        raise NotImplementedError

    def get_for_slot(self, slot: TimetableSlot) -> Optional[TimetableEntry]:
        raise NotImplementedError

    def insert(
        self,
        *,
        slot: TimetableSlot,
        subject_id: int,
        faculty_id: int,
        room: Optional[str] = None,
        mdc_course_id: Optional[int] = None,
    ) -> int:
        """Occupy an empty slot in one conditional write.

        The slot's uniqueness is checked by the store, not by a prior read; the
        loser of two concurrent inserts gets SlotOccupiedError.
        """

        raise NotImplementedError

    def update(
        self,
        *,
        entry_id: int,
        subject_id: int,
        faculty_id: int,
        room: Optional[str],
        mdc_course_id: Optional[int] = None,
    ) -> bool:
        """False when the entry does not exist."""

        raise NotImplementedError

    def delete(self, entry_id: int) -> bool:
        raise NotImplementedError

    def list_for_grid(
        self,
        *,
        department_id: int,
        semester_id: int,
        academic_year_id: int,
    ) -> Sequence[TimetableEntryView]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def has_subject_on_day(self, *, subject_id: int, day_of_week: int) -> bool:
        raise NotImplementedError

    def save_mdc_entry(
        self,
        *,
        slot: TimetableSlot,
        entry_id: Optional[int],
        subject_id: int,
        faculty_id: int,
        room: Optional[str],
        mdc_course_id: int,
        mdc_department_id: int,
        semester_number: int,
    ) -> MDCSaveResult:
        """Save one MDC slot and hand its faculty to every copy of the course.

        In a single transaction: insert or update the entry, set the faculty on
        every MDC course offered by (mdc_department_id, semester_number), and on
        every timetable entry linked to those courses. `propagated` counts the
        linked entries whose faculty changed.
        """

        raise NotImplementedError
