from __future__ import annotations

import pytest

from src.campustrack.campustrack.core.exceptions import NotFoundError, ValidationError
from src.campustrack.campustrack.mdc.model import MDCCourse, MDCCourseSummary
from src.campustrack.campustrack.mdc.service import MDCService


class InMemoryMDCCourses:
    def __init__(self):
        self.courses: dict[int, MDCCourse] = {}
        self._next_id = 1

    def upsert(self, *, course_name, home_department_id, mdc_department_id, year, semester_number, faculty_id, student_ids):
        key = (home_department_id, mdc_department_id, year, semester_number)
        existing = next(
            (
                c
                for c in self.courses.values()
                if (c.home_department_id, c.mdc_department_id, c.year, c.semester_number) == key
            ),
            None,
        )
        course_id = existing.course_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self.courses[course_id] = MDCCourse(
            course_id=course_id,
            course_name=course_name,
            home_department_id=home_department_id,
            mdc_department_id=mdc_department_id,
            year=year,
            semester_number=semester_number,
            faculty_id=faculty_id,
            student_ids=tuple(student_ids),
        )
        return course_id

    def delete(self, course_id):
        return self.courses.pop(int(course_id), None) is not None

    def get_by_id(self, course_id):
        return self.courses.get(int(course_id))

    def find_for_offering(self, *, mdc_department_id, semester_number):
        return next(
            (
                c
                for c in sorted(self.courses.values(), key=lambda c: c.course_id)
                if c.mdc_department_id == mdc_department_id and c.semester_number == semester_number
            ),
            None,
        )

    def list_for_faculty(self, faculty_id):
        mine = [c for c in self.courses.values() if c.faculty_id == faculty_id]
        mine.sort(key=lambda c: (c.year, c.semester_number))
        return [
            MDCCourseSummary(
                course_id=c.course_id,
                course_name=c.course_name,
                year=c.year,
                semester_number=c.semester_number,
                student_count=len(c.student_ids),
            )
            for c in mine
        ]


def _save(service, **overrides):
    args = {
        "course_name": "Statistics for Everyone",
        "home_department_id": 1,
        "mdc_department_id": 3,
        "year": 1,
        "semester_number": 1,
        "student_ids": [1, 2, 3],
        "faculty_id": 30,
    }
    args.update(overrides)
    return service.save_course(**args)


def test_save_course_creates_then_updates_the_same_combination():
    repo = InMemoryMDCCourses()
    service = MDCService(repo)

    first = _save(service)
    second = _save(service, course_name="  Applied Statistics ", student_ids=[4, 4, 5], faculty_id=None)

    assert first == second
    course = repo.courses[first]
    assert course.course_name == "Applied Statistics"
    assert course.student_ids == (4, 5)
    assert course.faculty_id is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"course_name": "   "},
        {"year": 0},
        {"year": 5},
        {"semester_number": 0},
        {"semester_number": 9},
        {"student_ids": []},
    ],
)
def test_save_course_validates_input(overrides):
    repo = InMemoryMDCCourses()

    with pytest.raises(ValidationError):
        _save(MDCService(repo), **overrides)
    assert repo.courses == {}


def test_delete_course():
    repo = InMemoryMDCCourses()
    service = MDCService(repo)
    course_id = _save(service)

    service.delete_course(course_id)

    assert repo.courses == {}
    with pytest.raises(NotFoundError):
        service.delete_course(course_id)


def test_courses_for_faculty_are_ordered_by_year_and_semester():
    repo = InMemoryMDCCourses()
    service = MDCService(repo)
    _save(service, year=2, semester_number=3)
    _save(service, year=1, semester_number=2, home_department_id=2)
    _save(service, year=1, semester_number=1, faculty_id=31)

    courses = service.courses_for_faculty(30)

    assert [(c.year, c.semester_number, c.student_count) for c in courses] == [(1, 2, 3), (2, 3, 3)]


def test_configuration_lookup_is_by_offering_department_and_semester():
    service = MDCService(InMemoryMDCCourses())
    course_id = _save(service)

    assert service.configuration_for(mdc_department_id=3, semester_number=1).course_id == course_id
    assert service.configuration_for(mdc_department_id=1, semester_number=1) is None
