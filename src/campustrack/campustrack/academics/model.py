from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Department:
    department_id: int
    code: str
    name: str


@dataclass(frozen=True)
class Semester:
    semester_id: int
    number: int
    name: str
    academic_year_id: int


@dataclass(frozen=True)
class Subject:
    subject_id: int
    code: str
    name: str
    department_id: int
    semester_id: int
    is_mdc: bool = False


@dataclass(frozen=True)
class Faculty:
    faculty_id: int
    full_name: str
    department_id: int
    is_active: bool = True
