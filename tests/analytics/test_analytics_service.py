from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

import pytest

from src.campustrack.campustrack.academics.model import Department
from src.campustrack.campustrack.analytics.service import AnalyticsService
from src.campustrack.campustrack.attendance.model import AttendanceReportRow, AttendanceScope
from src.campustrack.campustrack.core.enums import AttendanceStatus
from src.campustrack.campustrack.core.exceptions import InvalidRangeError, StoreUnavailableError

TODAY = date(2026, 3, 30)


def _row(student_id, day, present=True, *, department_id=1, subject_id=1, faculty_id=1):
    return AttendanceReportRow(
        student_id=student_id,
        department_id=department_id,
        subject_id=subject_id,
        faculty_id=faculty_id,
        work_date=day,
        status=AttendanceStatus.PRESENT if present else AttendanceStatus.ABSENT,
    )


@dataclass
class InMemoryAttendance:
    rows: list[AttendanceReportRow] = field(default_factory=list)
    calls: list[tuple] = field(default_factory=list)
    fail: bool = False

    def get_report_rows(self, *, start_date, end_date, scope=None):
        self.calls.append((start_date, end_date, scope))
        if self.fail:
            raise StoreUnavailableError("Database temporarily unavailable")
        scope = scope or AttendanceScope()
        out = []
        for r in self.rows:
            if not (start_date <= r.work_date <= end_date):
                continue
            if scope.department_id is not None and r.department_id != scope.department_id:
                continue
            if scope.faculty_id is not None and r.faculty_id != scope.faculty_id:
                continue
            if scope.student_id is not None and r.student_id != scope.student_id:
                continue
            out.append(r)
        return out


@dataclass
class InMemoryAcademics:
    departments: list[Department]

    def list_departments(self):
        return list(self.departments)


@dataclass
class InMemoryTimetable:
    entries: int = 0

    def count_all(self):
        return self.entries


def _service(rows, *, entries=0, **kwargs):
    attendance = InMemoryAttendance(rows=list(rows))
    academics = InMemoryAcademics(
        [
            Department(department_id=1, code="CSE", name="Computer Science"),
            Department(department_id=2, code="ECE", name="Electronics"),
        ]
    )
    return AnalyticsService(attendance, academics, InMemoryTimetable(entries), **kwargs), attendance


def test_overall_stats_uses_current_and_previous_thirty_days():
    rows = [
        _row(1, TODAY),
        _row(1, TODAY - timedelta(days=30), present=False),  # still current (inclusive)
        _row(1, TODAY - timedelta(days=31), present=False),  # previous
        _row(1, TODAY - timedelta(days=60)),  # previous
        _row(1, TODAY - timedelta(days=61), present=False),  # outside both
    ]
    service, attendance = _service(rows, entries=12)

    stats = service.overall_stats(window_end=TODAY)

    assert attendance.calls[0][:2] == (TODAY - timedelta(days=60), TODAY)
    assert stats.overall_percentage == 50
    assert stats.trend == 0.0
    assert stats.classes_today == 12
    assert stats.at_risk_count == 1


def test_overall_stats_with_no_records_is_all_zero():
    service, _ = _service([], entries=0)

    stats = service.overall_stats(window_end=TODAY)

    assert (stats.overall_percentage, stats.at_risk_count, stats.perfect_attendance_count) == (0, 0, 0)


def test_department_breakdown_excludes_empty_departments():
    rows = [_row(1, TODAY, department_id=1), _row(2, TODAY - timedelta(days=2), False, department_id=1)]
    service, _ = _service(rows)

    result = service.department_breakdown(window_end=TODAY)

    assert [(d.department_code, d.percentage) for d in result] == [("CSE", 50)]


def test_weekly_trend_fetches_half_open_span():
    service, attendance = _service([_row(1, TODAY)])

    weeks = service.weekly_trend(weeks=5, anchor=TODAY)

    assert len(weeks) == 5
    assert attendance.calls[0][:2] == (TODAY - timedelta(days=35), TODAY - timedelta(days=1))
    assert weeks[-1].total == 0


@pytest.mark.parametrize("weeks", [0, -2, "x"])
def test_weekly_trend_rejects_bad_week_counts(weeks):
    service, _ = _service([])

    with pytest.raises(InvalidRangeError):
        service.weekly_trend(weeks=weeks, anchor=TODAY)


def test_inverted_window_is_invalid_range():
    service, attendance = _service([])

    with pytest.raises(InvalidRangeError):
        service.report_rows(TODAY, TODAY - timedelta(days=1))
    assert attendance.calls == []


def test_low_attendance_uses_configured_limit():
    rows = []
    for student_id in range(1, 6):
        rows += [_row(student_id, TODAY, False), _row(student_id, TODAY, student_id % 2 == 0)]
    service, _ = _service(rows, low_attendance_limit=3)

    result = service.low_attendance_students(window_end=TODAY)

    assert len(result) == 3
    assert [s.percentage for s in result] == sorted(s.percentage for s in result)


def test_recent_sessions_are_newest_first_within_seven_days():
    rows = [
        _row(1, TODAY - timedelta(days=8)),
        _row(1, TODAY - timedelta(days=3), subject_id=2),
        _row(1, TODAY - timedelta(days=1), subject_id=3),
        _row(2, TODAY - timedelta(days=1), False, subject_id=3),
    ]
    service, _ = _service(rows)

    sessions = service.recent_sessions(today=TODAY)

    assert [s.subject_id for s in sessions] == [3, 2]
    assert (sessions[0].present, sessions[0].absent) == (1, 1)


def test_scope_is_passed_to_the_store():
    rows = [_row(1, TODAY, faculty_id=1), _row(2, TODAY, False, faculty_id=2)]
    service, attendance = _service(rows)
    scope = AttendanceScope(faculty_id=2)

    stats = service.overall_stats(window_end=TODAY, scope=scope)

    assert attendance.calls[0][2] == scope
    assert stats.overall_percentage == 0


def test_student_summary_is_scoped_to_the_student():
    rows = [_row(1, TODAY), _row(1, TODAY, False, subject_id=2), _row(2, TODAY, False)]
    service, attendance = _service(rows)

    summary = service.student_summary(1, end_date=TODAY)

    assert attendance.calls[0][2].student_id == 1
    assert summary.percentage == 50
    assert len(summary.subjects) == 2


def test_store_failure_propagates():
    service, attendance = _service([])
    attendance.fail = True

    with pytest.raises(StoreUnavailableError):
        service.department_breakdown(window_end=TODAY)


def test_monthly_trend_spans_whole_months():
    service, attendance = _service([_row(1, date(2025, 10, 1))])

    points = service.monthly_trend(months=6, anchor=TODAY)

    assert attendance.calls[0][:2] == (date(2025, 10, 1), date(2026, 3, 31))
    assert [p.month for p in points] == ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"]
    assert points[0].attendance == 100
