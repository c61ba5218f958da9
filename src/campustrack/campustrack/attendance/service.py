from __future__ import annotations

from datetime import date
from typing import Mapping

from ..academics.repository import AcademicRepository
from ..common.app_logging import get_logger
from ..common.validators import require_between, require_positive_id
from ..core.constants import TIMETABLE_PERIODS
from ..core.enums import AttendanceStatus, Weekday
from ..core.exceptions import NotFoundError, ValidationError
from ..timetable.repository import TimetableRepository
from .repository import AttendanceRepository
from .sessions import ClassSession

_logger = get_logger("campustrack.attendance")


def _status(value) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).upper())
    except ValueError:
        raise ValidationError(f"Unknown attendance status {value!r}")


class AttendanceService:
    """Marking side of the record store: one call per class taken."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        academics: AcademicRepository,
        timetable: TimetableRepository,
    ):
        self._attendance = attendance
        self._academics = academics
        self._timetable = timetable

    def mark_session(
        self,
        *,
        subject_id: int,
        faculty_id: int,
        work_date: date,
        period: int,
        marks: Mapping[int, AttendanceStatus | str],
    ) -> ClassSession:
        if not marks:
            raise ValidationError("No students to mark")

        subject_id = require_positive_id(subject_id, "Subject")
        faculty_id = require_positive_id(faculty_id, "Faculty")
        period = require_between(period, "Period", 1, TIMETABLE_PERIODS)

        weekday = Weekday.from_date(work_date)
        if weekday is None:
            raise ValidationError("No classes are scheduled on Sunday")

        subject = self._academics.get_subject(subject_id)
        if not subject:
            raise NotFoundError("Subject not found")
        faculty = self._academics.get_faculty(faculty_id)
        if not faculty:
            raise NotFoundError("Faculty not found")

        if not self._timetable.has_subject_on_day(subject_id=subject_id, day_of_week=int(weekday)):
            raise ValidationError(f"{subject.code} is not on the timetable for {weekday.name.title()}")

        normalized = [(require_positive_id(sid, "Student"), _status(st)) for sid, st in marks.items()]
        created = self._attendance.create_records(
            subject_id=subject_id,
            marked_by=faculty_id,
            work_date=work_date,
            period=period,
            marks=normalized,
        )

        present = sum(1 for _, st in normalized if st == AttendanceStatus.PRESENT)
        _logger.info(
            "attendance marked",
            extra={"subject_id": subject_id, "faculty_id": faculty_id, "work_date": work_date, "records": created},
        )
        return ClassSession(
            work_date=work_date,
            subject_id=subject_id,
            faculty_id=faculty_id,
            present=present,
            absent=len(normalized) - present,
            roster=tuple(sid for sid, _ in normalized),
            subject_code=subject.code,
            subject_name=subject.name,
            faculty_name=faculty.full_name,
        )
