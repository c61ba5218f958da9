"""Pure aggregate computations over fetched attendance rows.

Nothing here touches the store. Empty inputs resolve to 0% or empty lists,
never to errors. Percentages are whole numbers rounded half up; trend deltas
keep one decimal.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, TypeVar

from ..academics.model import Department
from ..attendance.model import AttendanceReportRow
from ..common.percent import attendance_percentage, attendance_rate, round_half_up
from ..core.constants import (
    AT_RISK_PERCENT,
    AT_RISK_RATIO,
    CRITICAL_RATIO,
    DAYS_PER_WEEK,
    MONTHLY_TARGET_PERCENT,
    PERIOD_HOUR_LABELS,
    TIMETABLE_PERIODS,
)
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
    SubjectAttendance,
    WeekdayAttendance,
    WeeklyAttendance,
)

K = TypeVar("K", bound=Hashable)

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

# (label, lowest percentage, color); checked top-down against the unrounded rate.
DISTRIBUTION_BRACKETS = (
    ("90-100%", 90, "#22c55e"),
    ("75-89%", 75, "#3b82f6"),
    ("60-74%", 60, "#f59e0b"),
    ("Below 60%", None, "#ef4444"),
)


@dataclass
class Tally:
    present: int = 0
    total: int = 0

    def add(self, row: AttendanceReportRow) -> None:
        self.total += 1
        if row.is_present:
            self.present += 1

    @property
    def ratio(self) -> float:
        return self.present / self.total if self.total else 0.0

    @property
    def percentage(self) -> int:
        return attendance_percentage(self.present, self.total)


def tally(rows: Iterable[AttendanceReportRow]) -> Tally:
    t = Tally()
    for row in rows:
        t.add(row)
    return t


def tally_by(rows: Iterable[AttendanceReportRow], key: Callable[[AttendanceReportRow], K]) -> Dict[K, Tally]:
    """Per-key tallies; keys keep the order they were first seen in."""

    tallies: Dict[K, Tally] = {}
    for row in rows:
        k = key(row)
        t = tallies.get(k)
        if t is None:
            t = tallies[k] = Tally()
        t.add(row)
    return tallies


def modal(values: Iterable[K]) -> Optional[K]:
    """Most frequent value; ties go to the value seen first."""

    counts = Counter(values)
    best: Optional[K] = None
    best_count = 0
    # Counter preserves first-insertion order, so strict '>' keeps the earliest on ties.
    for value, count in counts.items():
        if count > best_count:
            best, best_count = value, count
    return best


def trend_delta(current_pct: float, previous_rate: float) -> float:
    return round_half_up(current_pct - previous_rate, 1)


def overall_snapshot(
    current: Sequence[AttendanceReportRow],
    previous: Sequence[AttendanceReportRow],
    *,
    classes_today: int,
) -> AttendanceStatSnapshot:
    overall = tally(current)
    prev = tally(previous)
    per_student = tally_by(current, lambda r: r.student_id)

    return AttendanceStatSnapshot(
        overall_percentage=overall.percentage,
        classes_today=int(classes_today),
        at_risk_count=sum(1 for t in per_student.values() if t.ratio < AT_RISK_RATIO),
        perfect_attendance_count=sum(1 for t in per_student.values() if t.present == t.total),
        trend=trend_delta(overall.percentage, attendance_rate(prev.present, prev.total)),
    )


def department_breakdown(
    rows: Sequence[AttendanceReportRow],
    departments: Sequence[Department],
) -> List[DepartmentAttendance]:
    """One entry per department with records, in the order `departments` is given."""

    per_dept = tally_by(rows, lambda r: r.department_id)
    result = []
    for dept in departments:
        t = per_dept.get(dept.department_id)
        if t is None or t.total == 0:
            continue
        result.append(
            DepartmentAttendance(
                department_id=dept.department_id,
                department_code=dept.code,
                department_name=dept.name,
                present=t.present,
                total=t.total,
                percentage=t.percentage,
            )
        )
    return result


def week_index(day: date, anchor: date) -> int:
    """Bucket i holds [anchor - (i+1)*7d, anchor - i*7d); -1 for days on or after the anchor."""

    delta = (anchor - day).days
    if delta <= 0:
        return -1
    return (delta - 1) // DAYS_PER_WEEK


def weekly_trend(rows: Sequence[AttendanceReportRow], *, weeks: int, anchor: date) -> List[WeeklyAttendance]:
    """Exactly `weeks` buckets, oldest first, labeled "Week 1".."Week N"; empty weeks report 0."""

    per_week = tally_by(rows, lambda r: week_index(r.work_date, anchor))
    result = []
    for position, i in enumerate(range(weeks - 1, -1, -1), start=1):
        t = per_week.get(i) or Tally()
        result.append(
            WeeklyAttendance(
                label=f"Week {position}",
                start_date=anchor - timedelta(days=(i + 1) * DAYS_PER_WEEK),
                end_date=anchor - timedelta(days=i * DAYS_PER_WEEK),
                present=t.present,
                total=t.total,
                percentage=t.percentage,
            )
        )
    return result


def low_attendance(rows: Sequence[AttendanceReportRow], *, limit: int) -> List[LowAttendanceStudent]:
    """Students under 75% (rounded), lowest first, at most `limit` of them."""

    first_rows: Dict[int, AttendanceReportRow] = {}
    by_student: Dict[int, List[AttendanceReportRow]] = {}
    for row in rows:
        first_rows.setdefault(row.student_id, row)
        by_student.setdefault(row.student_id, []).append(row)

    result = []
    for student_id, t in tally_by(rows, lambda r: r.student_id).items():
        pct = t.percentage
        if pct >= AT_RISK_PERCENT:
            continue
        student_rows = by_student[student_id]
        top_subject = modal(r.subject_id for r in student_rows)
        subject_row = next((r for r in student_rows if r.subject_id == top_subject), None)
        first = first_rows[student_id]
        result.append(
            LowAttendanceStudent(
                student_id=student_id,
                student_name=first.student_name,
                enrollment_no=first.enrollment_no,
                department_code=first.department_code,
                present=t.present,
                total=t.total,
                percentage=pct,
                subject_id=top_subject,
                subject_code=subject_row.subject_code if subject_row else "",
                subject_name=subject_row.subject_name if subject_row else "",
            )
        )

    result.sort(key=lambda s: s.percentage)
    return result[: max(0, limit)]


def student_summary(student_id: int, rows: Sequence[AttendanceReportRow]) -> StudentSummary:
    overall = tally(rows)
    names: Dict[int, AttendanceReportRow] = {}
    for row in rows:
        names.setdefault(row.subject_id, row)

    subjects = tuple(
        SubjectAttendance(
            subject_id=subject_id,
            subject_code=names[subject_id].subject_code,
            subject_name=names[subject_id].subject_name,
            present=t.present,
            total=t.total,
            percentage=t.percentage,
        )
        for subject_id, t in tally_by(rows, lambda r: r.subject_id).items()
    )
    return StudentSummary(
        student_id=int(student_id),
        present=overall.present,
        total=overall.total,
        percentage=overall.percentage,
        subjects=subjects,
    )


def _weekday_tallies(rows: Iterable[AttendanceReportRow]) -> Dict[str, Tally]:
    tallies = {name: Tally() for name in WEEKDAY_NAMES}
    for row in rows:
        weekday = row.work_date.weekday()
        if weekday < len(WEEKDAY_NAMES):
            tallies[WEEKDAY_NAMES[weekday]].add(row)
    return tallies


def weekday_rates(rows: Sequence[AttendanceReportRow]) -> List[WeekdayAttendance]:
    return [WeekdayAttendance(day=day, rate=t.percentage) for day, t in _weekday_tallies(rows).items()]


def analytics_summary(
    current: Sequence[AttendanceReportRow],
    previous: Sequence[AttendanceReportRow],
) -> AnalyticsSummary:
    overall = tally(current)
    average = round_half_up(attendance_rate(overall.present, overall.total), 1) if overall.total else 0.0

    peak_day, peak_rate = WEEKDAY_NAMES[0], 0
    for day, t in _weekday_tallies(current).items():
        if t.total and t.percentage > peak_rate:
            peak_day, peak_rate = day, t.percentage

    per_student = tally_by(current, lambda r: r.student_id)
    prev = tally(previous)

    return AnalyticsSummary(
        average_attendance=average,
        peak_day=peak_day,
        peak_day_rate=peak_rate,
        critical_students=sum(1 for t in per_student.values() if t.ratio < CRITICAL_RATIO),
        classes_tracked=len({(r.work_date, r.subject_id) for r in current}),
        trend=trend_delta(average, attendance_rate(prev.present, prev.total)),
    )


def monthly_trend(
    rows: Sequence[AttendanceReportRow],
    months: Sequence[tuple[date, date]],
) -> List[MonthlyAttendance]:
    """One point per (first, last) month window, in the order given."""

    result = []
    for first, last in months:
        t = tally(r for r in rows if first <= r.work_date <= last)
        result.append(MonthlyAttendance(month=first.strftime("%b"), attendance=t.percentage, target=MONTHLY_TARGET_PERCENT))
    return result


def department_comparison(
    current: Sequence[AttendanceReportRow],
    previous: Sequence[AttendanceReportRow],
    departments: Sequence[Department],
) -> List[DepartmentComparison]:
    now = tally_by(current, lambda r: r.department_id)
    before = tally_by(previous, lambda r: r.department_id)
    result = []
    for dept in departments:
        cur_t = now.get(dept.department_id) or Tally()
        prev_t = before.get(dept.department_id) or Tally()
        if cur_t.total == 0 and prev_t.total == 0:
            continue
        result.append(
            DepartmentComparison(
                department_id=dept.department_id,
                department_code=dept.code,
                department_name=dept.name,
                current=cur_t.percentage,
                previous=prev_t.percentage,
            )
        )
    return result


def distribution(rows: Sequence[AttendanceReportRow]) -> List[DistributionBucket]:
    counts = {label: 0 for label, _, _ in DISTRIBUTION_BRACKETS}
    for t in tally_by(rows, lambda r: r.student_id).values():
        rate = attendance_rate(t.present, t.total)
        for label, floor, _ in DISTRIBUTION_BRACKETS:
            if floor is None or rate >= floor:
                counts[label] += 1
                break
    return [DistributionBucket(range=label, count=counts[label], color=color) for label, _, color in DISTRIBUTION_BRACKETS]


def period_pattern(rows: Sequence[AttendanceReportRow]) -> List[PeriodAttendance]:
    per_period = tally_by(rows, lambda r: r.period)
    result = []
    for period in range(1, TIMETABLE_PERIODS + 1):
        t = per_period.get(period) or Tally()
        result.append(
            PeriodAttendance(
                period=period,
                hour=PERIOD_HOUR_LABELS.get(period, f"Period {period}"),
                attendance=t.percentage,
            )
        )
    return result
