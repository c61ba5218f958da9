from __future__ import annotations

from typing import Optional, Sequence

from ..common.app_logging import get_logger
from ..common.validators import require_between, require_non_empty, require_positive_id
from ..core.constants import MDC_MAX_SEMESTER, MDC_MAX_YEAR, MDC_MIN_SEMESTER, MDC_MIN_YEAR
from ..core.exceptions import NotFoundError, ValidationError
from .model import MDCCourse, MDCCourseSummary
from .repository import MDCRepository

_logger = get_logger("campustrack.mdc")


class MDCService:
    def __init__(self, courses: MDCRepository):
        self._courses = courses

    def save_course(
        self,
        *,
        course_name: str,
        home_department_id: int,
        mdc_department_id: int,
        year: int,
        semester_number: int,
        student_ids: Sequence[int],
        faculty_id: Optional[int] = None,
    ) -> int:
        name = require_non_empty(course_name, "Course name")
        year = require_between(year, "Year", MDC_MIN_YEAR, MDC_MAX_YEAR)
        semester_number = require_between(semester_number, "Semester", MDC_MIN_SEMESTER, MDC_MAX_SEMESTER)
        if not student_ids:
            raise ValidationError("At least one student must be selected")

        course_id = self._courses.upsert(
            course_name=name,
            home_department_id=require_positive_id(home_department_id, "Home department"),
            mdc_department_id=require_positive_id(mdc_department_id, "MDC department"),
            year=year,
            semester_number=semester_number,
            faculty_id=require_positive_id(faculty_id, "Faculty") if faculty_id else None,
            student_ids=[require_positive_id(s, "Student") for s in dict.fromkeys(student_ids)],
        )
        _logger.info("mdc course saved", extra={"course_id": course_id, "students": len(student_ids)})
        return course_id

    def delete_course(self, course_id: int) -> None:
        if not self._courses.delete(require_positive_id(course_id, "Course")):
            raise NotFoundError("MDC course not found")
        _logger.info("mdc course deleted", extra={"course_id": course_id})

    def courses_for_faculty(self, faculty_id: int) -> Sequence[MDCCourseSummary]:
        return list(self._courses.list_for_faculty(require_positive_id(faculty_id, "Faculty")))

    def configuration_for(self, *, mdc_department_id: int, semester_number: int) -> Optional[MDCCourse]:
        return self._courses.find_for_offering(mdc_department_id=mdc_department_id, semester_number=semester_number)
