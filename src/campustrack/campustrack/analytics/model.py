from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional, Tuple


@dataclass(frozen=True)
class AttendanceStatSnapshot:
    overall_percentage: int
    classes_today: int
    at_risk_count: int
    perfect_attendance_count: int
    trend: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DepartmentAttendance:
    department_id: int
    department_code: str
    department_name: str
    present: int
    total: int
    percentage: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WeeklyAttendance:
    label: str
    start_date: date
    end_date: date  # exclusive
    present: int
    total: int
    percentage: int

    def as_dict(self) -> dict:
        return {
            "label": self.label,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "present": self.present,
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class LowAttendanceStudent:
    student_id: int
    student_name: str
    enrollment_no: str
    department_code: str
    present: int
    total: int
    percentage: int
    subject_id: Optional[int]
    subject_code: str
    subject_name: str

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SubjectAttendance:
    subject_id: int
    subject_code: str
    subject_name: str
    present: int
    total: int
    percentage: int


@dataclass(frozen=True)
class StudentSummary:
    student_id: int
    present: int
    total: int
    percentage: int
    subjects: Tuple[SubjectAttendance, ...] = ()

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AnalyticsSummary:
    average_attendance: float
    peak_day: str
    peak_day_rate: int
    critical_students: int
    classes_tracked: int
    trend: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyAttendance:
    month: str
    attendance: int
    target: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DepartmentComparison:
    department_id: int
    department_code: str
    department_name: str
    current: int
    previous: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WeekdayAttendance:
    day: str
    rate: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DistributionBucket:
    range: str
    count: int
    color: str

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PeriodAttendance:
    period: int
    hour: str
    attendance: int

    def as_dict(self) -> dict:
        return asdict(self)
