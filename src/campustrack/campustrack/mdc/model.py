from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class MDCCourse:
    """A multi-disciplinary course offered by `mdc_department_id` to students of `home_department_id`.

    One faculty member teaches every department's copy of the course.
    """

    course_id: int
    course_name: str
    home_department_id: int
    mdc_department_id: int
    year: int
    semester_number: int
    faculty_id: Optional[int] = None
    student_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class MDCCourseSummary:
    course_id: int
    course_name: str
    year: int
    semester_number: int
    student_count: int
    home_department_code: str = ""
    home_department_name: str = ""
    mdc_department_code: str = ""
    mdc_department_name: str = ""

    def as_dict(self) -> dict:
        return {
            "course_id": self.course_id,
            "course_name": self.course_name,
            "year": self.year,
            "semester": self.semester_number,
            "student_count": self.student_count,
            "home_department": {"code": self.home_department_code, "name": self.home_department_name},
            "mdc_department": {"code": self.mdc_department_code, "name": self.mdc_department_name},
        }
