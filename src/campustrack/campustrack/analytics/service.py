from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from ..academics.repository import AcademicRepository
from ..attendance.model import AttendanceReportRow, AttendanceScope
from ..attendance.repository import AttendanceRepository
from ..attendance.sessions import ClassSession, latest_first, reconstruct_sessions
from ..common.app_logging import get_logger
from ..common.datetime_utils import half_open, month_bounds, today_local, trailing_window
from ..common.validators import require_count, require_positive_id
from ..core.constants import (
    DEFAULT_LOW_ATTENDANCE_LIMIT,
    DEFAULT_MONTHS,
    DEFAULT_RECENT_SESSIONS_DAYS,
    DEFAULT_RECENT_SESSIONS_LIMIT,
    DEFAULT_WEEKS,
    DEFAULT_WINDOW_DAYS,
    DAYS_PER_WEEK,
)
from ..core.exceptions import InvalidRangeError
from ..timetable.repository import TimetableRepository
from . import aggregator
from .model import (
    AnalyticsSummary,
    AttendanceStatSnapshot,
    DepartmentAttendance,
    DepartmentComparison,
    DistributionBucket,
    LowAttendanceStudent,
    MonthlyAttendance,
    PeriodAttendance,
    StudentSummary,
    WeekdayAttendance,
    WeeklyAttendance,
)

_logger = get_logger("campustrack.analytics")

# Student summaries cover the whole history unless a start date is given.
HISTORY_START = date(2000, 1, 1)


class AnalyticsService:
    """Read-only attendance queries.

    Every call fetches the rows it needs from the record store and hands them
    to the pure functions in `aggregator`. No-data windows give 0% or empty
    lists; store failures propagate as StoreUnavailableError.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        academics: AcademicRepository,
        timetable: TimetableRepository,
        *,
        window_days: int = DEFAULT_WINDOW_DAYS,
        low_attendance_limit: int = DEFAULT_LOW_ATTENDANCE_LIMIT,
        recent_days: int = DEFAULT_RECENT_SESSIONS_DAYS,
        recent_limit: int = DEFAULT_RECENT_SESSIONS_LIMIT,
    ):
        self._attendance = attendance
        self._academics = academics
        self._timetable = timetable
        self._window_days = require_count(window_days, "Window days")
        self._low_limit = require_count(low_attendance_limit, "Limit")
        self._recent_days = require_count(recent_days, "Days")
        self._recent_limit = require_count(recent_limit, "Limit")

    def report_rows(
        self,
        start_date: date,
        end_date: date,
        scope: Optional[AttendanceScope] = None,
    ) -> Sequence[AttendanceReportRow]:
        """Rows in the inclusive range [start_date, end_date]."""

        if end_date < start_date:
            raise InvalidRangeError("Window end is before its start")
        rows = self._attendance.get_report_rows(start_date=start_date, end_date=end_date, scope=scope)
        _logger.debug(
            "report rows fetched",
            extra={"start_date": start_date, "end_date": end_date, "rows": len(rows)},
        )
        return rows

    def _days(self, window_days: Optional[int]) -> int:
        return self._window_days if window_days is None else require_count(window_days, "Window days")

    def _current_and_previous(
        self,
        end: date,
        days: int,
        scope: Optional[AttendanceScope],
    ) -> Tuple[List[AttendanceReportRow], List[AttendanceReportRow]]:
        """Split [end - 2*days, end] into W = [end - days, end] and W_prev = [end - 2*days, end - days)."""

        boundary = end - timedelta(days=days)
        rows = self.report_rows(end - timedelta(days=2 * days), end, scope)
        current = [r for r in rows if r.work_date >= boundary]
        previous = [r for r in rows if r.work_date < boundary]
        return current, previous

    def overall_stats(
        self,
        *,
        window_end: Optional[date] = None,
        window_days: Optional[int] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> AttendanceStatSnapshot:
        """Snapshot over the trailing window compared with the window before it.

        `classes_today` counts every timetable entry, not only today's weekday.
        """
        end = window_end or today_local()
        current, previous = self._current_and_previous(end, self._days(window_days), scope)
        return aggregator.overall_snapshot(current, previous, classes_today=self._timetable.count_all())

    def department_breakdown(
        self,
        *,
        window_end: Optional[date] = None,
        window_days: Optional[int] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[DepartmentAttendance]:
        start, end = trailing_window(window_end or today_local(), self._days(window_days))
        rows = self.report_rows(start, end, scope)
        return aggregator.department_breakdown(rows, self._academics.list_departments())

    def weekly_trend(
        self,
        *,
        weeks: int = DEFAULT_WEEKS,
        anchor: Optional[date] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[WeeklyAttendance]:
        weeks = require_count(weeks, "Weeks", minimum=1)
        anchor = anchor or today_local()
        start, end = half_open(anchor - timedelta(days=weeks * DAYS_PER_WEEK), anchor)
        rows = self.report_rows(start, end, scope)
        return aggregator.weekly_trend(rows, weeks=weeks, anchor=anchor)

    def low_attendance_students(
        self,
        *,
        window_end: Optional[date] = None,
        window_days: Optional[int] = None,
        limit: Optional[int] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[LowAttendanceStudent]:
        limit = self._low_limit if limit is None else require_count(limit, "Limit")
        start, end = trailing_window(window_end or today_local(), self._days(window_days))
        return aggregator.low_attendance(self.report_rows(start, end, scope), limit=limit)

    def recent_sessions(
        self,
        *,
        today: Optional[date] = None,
        days: Optional[int] = None,
        limit: Optional[int] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[ClassSession]:
        days = self._recent_days if days is None else require_count(days, "Days")
        limit = self._recent_limit if limit is None else require_count(limit, "Limit")
        start, end = trailing_window(today or today_local(), days)
        sessions = reconstruct_sessions(self.report_rows(start, end, scope))
        return latest_first(sessions, limit)

    def sessions_on(self, day: Optional[date] = None, *, scope: Optional[AttendanceScope] = None) -> List[ClassSession]:
        day = day or today_local()
        return reconstruct_sessions(self.report_rows(day, day, scope))

    def student_summary(
        self,
        student_id: int,
        *,
        semester_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> StudentSummary:
        student_id = require_positive_id(student_id, "Student")
        scope = AttendanceScope(student_id=student_id, semester_id=semester_id)
        rows = self.report_rows(start_date or HISTORY_START, end_date or today_local(), scope)
        return aggregator.student_summary(student_id, rows)

    def analytics_summary(
        self,
        *,
        window_end: Optional[date] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> AnalyticsSummary:
        current, previous = self._current_and_previous(window_end or today_local(), self._window_days, scope)
        return aggregator.analytics_summary(current, previous)

    def monthly_trend(
        self,
        *,
        months: int = DEFAULT_MONTHS,
        anchor: Optional[date] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[MonthlyAttendance]:
        months = require_count(months, "Months", minimum=1)
        anchor = anchor or today_local()
        windows = [month_bounds(anchor, back) for back in range(months - 1, -1, -1)]
        rows = self.report_rows(windows[0][0], windows[-1][1], scope)
        return aggregator.monthly_trend(rows, windows)

    def department_comparison(
        self,
        *,
        window_end: Optional[date] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[DepartmentComparison]:
        current, previous = self._current_and_previous(window_end or today_local(), self._window_days, scope)
        return aggregator.department_comparison(current, previous, self._academics.list_departments())

    def _window_rows(self, window_end: Optional[date], scope: Optional[AttendanceScope]):
        start, end = trailing_window(window_end or today_local(), self._window_days)
        return self.report_rows(start, end, scope)

    def attendance_by_weekday(
        self,
        *,
        window_end: Optional[date] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[WeekdayAttendance]:
        return aggregator.weekday_rates(self._window_rows(window_end, scope))

    def attendance_distribution(
        self,
        *,
        window_end: Optional[date] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[DistributionBucket]:
        return aggregator.distribution(self._window_rows(window_end, scope))

    def period_pattern(
        self,
        *,
        window_end: Optional[date] = None,
        scope: Optional[AttendanceScope] = None,
    ) -> List[PeriodAttendance]:
        return aggregator.period_pattern(self._window_rows(window_end, scope))
