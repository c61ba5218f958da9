from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's mark for one class period (append-only)."""

    record_id: int
    student_id: int
    subject_id: int
    marked_by: int
    work_date: date
    period: int
    status: AttendanceStatus


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for analytics: a record joined with student, subject and faculty."""

    student_id: int
    department_id: int
    subject_id: int
    faculty_id: int
    work_date: date
    status: AttendanceStatus
    period: int = 1
    record_id: int = 0
    student_name: str = ""
    enrollment_no: str = ""
    department_code: str = ""
    department_name: str = ""
    subject_code: str = ""
    subject_name: str = ""
    faculty_name: str = ""

    @property
    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENT


@dataclass(frozen=True)
class AttendanceScope:
    """Optional, caller-derived narrowing of which records a query sees.

    e.g. a faculty dashboard passes its own faculty_id; an admin passes nothing.
    """

    department_id: Optional[int] = None
    semester_id: Optional[int] = None
    subject_id: Optional[int] = None
    faculty_id: Optional[int] = None
    student_id: Optional[int] = None
