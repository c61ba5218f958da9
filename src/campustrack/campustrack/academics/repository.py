from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Department, Faculty, Semester, Subject


class AcademicRepository(Protocol):
    """Read access to the department -> semester -> subject -> faculty graph.

    CRUD for these entities lives outside this package; only the lookups the
    timetable and analytics need are declared here.
    """

    def list_departments(self) -> Sequence[Department]:
        raise NotImplementedError

    def get_semester(self, semester_id: int) -> Optional[Semester]:
        raise NotImplementedError

    def get_subject(self, subject_id: int) -> Optional[Subject]:
        raise NotImplementedError

    def get_faculty(self, faculty_id: int) -> Optional[Faculty]:
        raise NotImplementedError

    def find_mdc_subject(self, *, department_id: int, semester_number: int) -> Optional[Subject]:
        """MDC-flagged subject a department offers for a semester number."""

        raise NotImplementedError
