"""Session reconstruction.

Attendance is stored one row per student. A class session is recovered by
grouping rows on (date, subject, marking faculty); two faculty marking the
same subject on the same day (a makeup class) are two sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Sequence, Tuple

from ..common.percent import attendance_percentage
from .model import AttendanceReportRow

SessionKey = Tuple[date, int, int]


@dataclass(frozen=True)
class ClassSession:
    work_date: date
    subject_id: int
    faculty_id: int
    present: int
    absent: int
    roster: Tuple[int, ...]
    subject_code: str = ""
    subject_name: str = ""
    department_code: str = ""
    faculty_name: str = ""

    @property
    def key(self) -> SessionKey:
        return (self.work_date, self.subject_id, self.faculty_id)

    @property
    def total(self) -> int:
        return self.present + self.absent

    @property
    def percentage(self) -> int:
        return attendance_percentage(self.present, self.total)

    def as_row(self) -> dict:
        return {
            "date": self.work_date.isoformat(),
            "subject_id": self.subject_id,
            "course": self.subject_code,
            "subject_name": self.subject_name,
            "section": self.department_code,
            "faculty_id": self.faculty_id,
            "faculty": self.faculty_name,
            "present": self.present,
            "absent": self.absent,
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass
class _SessionTally:
    first: AttendanceReportRow
    present: int = 0
    absent: int = 0
    roster: List[int] = field(default_factory=list)

    def add(self, row: AttendanceReportRow) -> None:
        if row.is_present:
            self.present += 1
        else:
            self.absent += 1
        if row.student_id not in self.roster:
            self.roster.append(row.student_id)

    def freeze(self) -> ClassSession:
        return ClassSession(
            work_date=self.first.work_date,
            subject_id=self.first.subject_id,
            faculty_id=self.first.faculty_id,
            present=self.present,
            absent=self.absent,
            roster=tuple(self.roster),
            subject_code=self.first.subject_code,
            subject_name=self.first.subject_name,
            department_code=self.first.department_code,
            faculty_name=self.first.faculty_name,
        )


def reconstruct_sessions(rows: Iterable[AttendanceReportRow]) -> List[ClassSession]:
    """Group rows into sessions, in the order each session is first seen."""

    tallies: Dict[SessionKey, _SessionTally] = {}
    for row in rows:
        key = (row.work_date, row.subject_id, row.faculty_id)
        tally = tallies.get(key)
        if tally is None:
            tally = tallies[key] = _SessionTally(first=row)
        tally.add(row)
    return [t.freeze() for t in tallies.values()]


def latest_first(sessions: Sequence[ClassSession], limit: int | None = None) -> List[ClassSession]:
    """Newest date first; sessions on the same date keep their order. Optionally truncated."""

    ordered = sorted(sessions, key=lambda s: s.work_date, reverse=True)
    if limit is not None:
        ordered = ordered[: max(0, int(limit))]
    return ordered
