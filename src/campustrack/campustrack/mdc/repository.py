from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MDCCourse, MDCCourseSummary


class MDCRepository(Protocol):
    def get_by_id(self, course_id: int) -> Optional[MDCCourse]:
        raise NotImplementedError

    def find_for_offering(self, *, mdc_department_id: int, semester_number: int) -> Optional[MDCCourse]:
        """First course (lowest id) the department offers in that semester number."""

        raise NotImplementedError

    def upsert(
        self,
        *,
        course_name: str,
        home_department_id: int,
        mdc_department_id: int,
        year: int,
        semester_number: int,
        faculty_id: Optional[int],
        student_ids: Sequence[int],
    ) -> int:
        """Create or replace the course for (home, offering, year, semester); returns its id."""

        raise NotImplementedError

    def delete(self, course_id: int) -> bool:
        raise NotImplementedError

    def list_for_faculty(self, faculty_id: int) -> Sequence[MDCCourseSummary]:
        raise NotImplementedError
