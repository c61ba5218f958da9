from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import AttendanceStatus
from .model import AttendanceReportRow, AttendanceScope


class AttendanceRepository(Protocol):
    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        scope: Optional[AttendanceScope] = None,
    ) -> Sequence[AttendanceReportRow]:
        """Records with work_date in [start_date, end_date], oldest first.

        Rows with the same date keep insertion order, which callers rely on for
        first-encountered tie breaking.
        """

        raise NotImplementedError

    def create_records(
        self,
        *,
        subject_id: int,
        marked_by: int,
        work_date: date,
        period: int,
        marks: Sequence[Tuple[int, AttendanceStatus]],
    ) -> int:
        """Append one record per (student_id, status) in a single transaction.

        Raises DuplicateAttendanceError when any student already has a mark for
        the same subject/date/period; nothing is written in that case.
        """

        raise NotImplementedError
