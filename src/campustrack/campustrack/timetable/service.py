from __future__ import annotations

from typing import Optional

from ..academics.model import Faculty, Subject
from ..academics.repository import AcademicRepository
from ..colors.service import ColorRegistry
from ..common.app_logging import get_logger
from ..common.validators import require_day_and_period, require_positive_id
from ..core.constants import TIMETABLE_DAYS, TIMETABLE_PERIODS
from ..core.enums import EntityKind
from ..core.exceptions import MDCNotConfiguredError, NotFoundError, ValidationError
from ..mdc.repository import MDCRepository
from .model import GridCell, SlotDraft, TimetableEntry, TimetableGrid, TimetableSlot
from .repository import TimetableRepository

_logger = get_logger("campustrack.timetable")

# Marks "leave the room as it is" in partial updates; None clears it.
KEEP = object()


def _clean_room(room) -> Optional[str]:
    if room is None:
        return None
    room = str(room).strip()
    return room or None


class TimetableService:
    """Weekly grid per (department, semester, academic year).

    A slot is either empty or holds exactly one entry. Occupying a slot is a
    single conditional insert in the store; mutations never partially apply.
    """

    def __init__(
        self,
        timetable: TimetableRepository,
        academics: AcademicRepository,
        mdc_courses: MDCRepository,
        colors: ColorRegistry,
    ):
        self._timetable = timetable
        self._academics = academics
        self._mdc = mdc_courses
        self._colors = colors

    def make_slot(
        self,
        *,
        department_id: int,
        semester_id: int,
        academic_year_id: int,
        day_of_week: int,
        period: int,
    ) -> TimetableSlot:
        day, period = require_day_and_period(day_of_week, period)
        return TimetableSlot(
            department_id=require_positive_id(department_id, "Department"),
            semester_id=require_positive_id(semester_id, "Semester"),
            academic_year_id=require_positive_id(academic_year_id, "Academic year"),
            day_of_week=day,
            period=period,
        )

    def _subject_for(self, slot: TimetableSlot, subject_id: int) -> Subject:
        subject = self._academics.get_subject(require_positive_id(subject_id, "Subject"))
        if not subject or subject.department_id != slot.department_id or subject.semester_id != slot.semester_id:
            raise NotFoundError("Subject not found for this department and semester")
        return subject

    def _faculty_for(self, slot: TimetableSlot, faculty_id: int) -> Faculty:
        faculty = self._academics.get_faculty(require_positive_id(faculty_id, "Faculty"))
        if not faculty or faculty.department_id != slot.department_id:
            raise NotFoundError("Faculty not found in this department")
        return faculty

    def _get_entry(self, entry_id: int) -> TimetableEntry:
        entry = self._timetable.get_by_id(require_positive_id(entry_id, "Entry"))
        if not entry:
            raise NotFoundError("Timetable entry not found")
        return entry

    def add_entry(
        self,
        slot: TimetableSlot,
        *,
        subject_id: int,
        faculty_id: int,
        room: Optional[str] = None,
    ) -> TimetableEntry:
        subject = self._subject_for(slot, subject_id)
        faculty = self._faculty_for(slot, faculty_id)

        entry_id = self._timetable.insert(
            slot=slot,
            subject_id=subject.subject_id,
            faculty_id=faculty.faculty_id,
            room=_clean_room(room),
        )

        _logger.info(
            "timetable entry added",
            extra={"entry_id": entry_id, "day_of_week": slot.day_of_week, "period": slot.period},
        )
        return TimetableEntry(
            entry_id=entry_id,
            slot=slot,
            subject_id=subject.subject_id,
            faculty_id=faculty.faculty_id,
            room=_clean_room(room),
        )

    def update_entry(
        self,
        entry_id: int,
        *,
        subject_id: Optional[int] = None,
        faculty_id: Optional[int] = None,
        room=KEEP,
    ) -> TimetableEntry:
        """Replace only the given fields; the slot itself never moves.

        Changing the faculty of an MDC-linked entry hands the new faculty to
        every copy of that course.
        """

        entry = self._get_entry(entry_id)
        new_subject = self._subject_for(entry.slot, subject_id).subject_id if subject_id is not None else entry.subject_id
        new_faculty = self._faculty_for(entry.slot, faculty_id).faculty_id if faculty_id is not None else entry.faculty_id
        new_room = entry.room if room is KEEP else _clean_room(room)

        if entry.is_mdc and new_faculty != entry.faculty_id:
            return self._save_mdc(
                entry.slot,
                entry_id=entry.entry_id,
                subject_id=new_subject,
                faculty_id=new_faculty,
                room=new_room,
                mdc_course_id=entry.mdc_course_id,
            )

        return self._apply_update(
            entry,
            subject_id=new_subject,
            faculty_id=new_faculty,
            room=new_room,
            mdc_course_id=entry.mdc_course_id,
        )

    def _apply_update(
        self,
        entry: TimetableEntry,
        *,
        subject_id: int,
        faculty_id: int,
        room: Optional[str],
        mdc_course_id: Optional[int],
    ) -> TimetableEntry:
        updated = self._timetable.update(
            entry_id=entry.entry_id,
            subject_id=subject_id,
            faculty_id=faculty_id,
            room=room,
            mdc_course_id=mdc_course_id,
        )
        if not updated:
            raise NotFoundError("Timetable entry not found")

        _logger.info("timetable entry updated", extra={"entry_id": entry.entry_id})
        return TimetableEntry(
            entry_id=entry.entry_id,
            slot=entry.slot,
            subject_id=subject_id,
            faculty_id=faculty_id,
            room=room,
            mdc_course_id=mdc_course_id,
        )

    def delete_entry(self, entry_id: int) -> None:
        entry = self._get_entry(entry_id)
        if not self._timetable.delete(entry.entry_id):
            raise NotFoundError("Timetable entry not found")
        _logger.info(
            "timetable entry deleted",
            extra={"entry_id": entry.entry_id, "day_of_week": entry.slot.day_of_week, "period": entry.slot.period},
        )

    def draft_for(self, slot: TimetableSlot) -> SlotDraft:
        """Current state of a slot as an editable draft (empty slots give an empty draft)."""

        entry = self._timetable.get_for_slot(slot)
        if not entry:
            return SlotDraft(slot=slot)
        return SlotDraft(
            slot=slot,
            entry_id=entry.entry_id,
            subject_id=entry.subject_id,
            faculty_id=entry.faculty_id,
            room=entry.room,
            mdc_course_id=entry.mdc_course_id,
        )

    def toggle_mdc(self, slot: TimetableSlot, enabled: bool, *, draft: Optional[SlotDraft] = None) -> SlotDraft:
        """Switch a slot draft to or from MDC mode. Nothing is written.

        Enabling looks up the course the slot's department offers for the
        slot's semester number and pre-fills subject and faculty from it. With
        no such course, MDCNotConfiguredError is raised and the slot stays as it was.
        """

        draft = draft or self.draft_for(slot)
        if not enabled:
            return draft.with_changes(mdc_course_id=None, course_name="")

        semester = self._academics.get_semester(slot.semester_id)
        if not semester:
            raise NotFoundError("Semester not found")

        course = self._mdc.find_for_offering(mdc_department_id=slot.department_id, semester_number=semester.number)
        if not course:
            _logger.warning(
                "mdc not configured",
                extra={"department_id": slot.department_id, "semester_number": semester.number},
            )
            raise MDCNotConfiguredError(
                "No MDC course is configured for this department and semester. Configure it first."
            )

        subject = self._academics.find_mdc_subject(department_id=slot.department_id, semester_number=semester.number)
        return draft.with_changes(
            subject_id=subject.subject_id if subject else None,
            faculty_id=course.faculty_id if course.faculty_id is not None else draft.faculty_id,
            mdc_course_id=course.course_id,
            course_name=course.course_name,
        )

    def save_draft(self, draft: SlotDraft) -> TimetableEntry:
        if draft.subject_id is None or draft.faculty_id is None:
            raise ValidationError("Subject and faculty are required")

        if draft.is_mdc:
            # An existing entry keeps its own slot whatever the draft claims.
            slot = self._get_entry(draft.entry_id).slot if draft.entry_id is not None else draft.slot
            return self._save_mdc(
                slot,
                entry_id=draft.entry_id,
                subject_id=self._subject_for(slot, draft.subject_id).subject_id,
                faculty_id=self._faculty_for(slot, draft.faculty_id).faculty_id,
                room=_clean_room(draft.room),
                mdc_course_id=draft.mdc_course_id,
            )

        if draft.entry_id is None:
            return self.add_entry(draft.slot, subject_id=draft.subject_id, faculty_id=draft.faculty_id, room=draft.room)

        entry = self._get_entry(draft.entry_id)
        return self._apply_update(
            entry,
            subject_id=self._subject_for(entry.slot, draft.subject_id).subject_id,
            faculty_id=self._faculty_for(entry.slot, draft.faculty_id).faculty_id,
            room=_clean_room(draft.room),
            mdc_course_id=None,
        )

    def _save_mdc(
        self,
        slot: TimetableSlot,
        *,
        entry_id: Optional[int],
        subject_id: int,
        faculty_id: int,
        room: Optional[str],
        mdc_course_id: int,
    ) -> TimetableEntry:
        course = self._mdc.get_by_id(require_positive_id(mdc_course_id, "MDC course"))
        semester = self._academics.get_semester(slot.semester_id)
        # Propagation must stay inside the course this slot's department offers.
        if (
            not course
            or not semester
            or course.mdc_department_id != slot.department_id
            or course.semester_number != semester.number
        ):
            raise NotFoundError("MDC course not found for this department and semester")

        result = self._timetable.save_mdc_entry(
            slot=slot,
            entry_id=entry_id,
            subject_id=subject_id,
            faculty_id=faculty_id,
            room=room,
            mdc_course_id=course.course_id,
            mdc_department_id=course.mdc_department_id,
            semester_number=course.semester_number,
        )

        _logger.info(
            "mdc slot saved",
            extra={"entry_id": result.entry_id, "mdc_course_id": course.course_id, "propagated": result.propagated},
        )
        return TimetableEntry(
            entry_id=result.entry_id,
            slot=slot,
            subject_id=subject_id,
            faculty_id=faculty_id,
            room=room,
            mdc_course_id=course.course_id,
        )

    def get_grid(
        self,
        department_id: int,
        semester_id: int,
        academic_year_id: Optional[int] = None,
    ) -> TimetableGrid:
        """6x5 grid of one (department, semester, academic year).

        Without an academic year the semester's own year is used, so entries of
        different years never share a grid.
        """

        if academic_year_id is None:
            semester = self._academics.get_semester(require_positive_id(semester_id, "Semester"))
            if not semester:
                raise NotFoundError("Semester not found")
            academic_year_id = semester.academic_year_id

        views = self._timetable.list_for_grid(
            department_id=department_id,
            semester_id=semester_id,
            academic_year_id=academic_year_id,
        )
        colors = self._colors.colors_for((v.entry.subject_id for v in views), EntityKind.SUBJECT)
        by_coord = {(v.entry.slot.day_of_week, v.entry.slot.period): v for v in views}

        rows = []
        for day in range(1, TIMETABLE_DAYS + 1):
            row = []
            for period in range(1, TIMETABLE_PERIODS + 1):
                view = by_coord.get((day, period))
                color = colors[view.entry.subject_id] if view else None
                row.append(GridCell(day_of_week=day, period=period, entry=view, color=color))
            rows.append(tuple(row))
        return TimetableGrid(
            department_id=int(department_id),
            semester_id=int(semester_id),
            academic_year_id=int(academic_year_id),
            rows=tuple(rows),
        )

    def classes_count(self) -> int:
        # Counts every entry, not only today's weekday; kept as the dashboard has always shown it.
        return self._timetable.count_all()
