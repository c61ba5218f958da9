from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department, Faculty, Semester, Subject
from .repository import AcademicRepository


def _subject(r: dict) -> Subject:
    return Subject(
        subject_id=int(r["subject_id"]),
        code=r["code"],
        name=r["name"],
        department_id=int(r["department_id"]),
        semester_id=int(r["semester_id"]),
        is_mdc=bool(r.get("is_mdc", False)),
    )


class MySQLAcademicRepository(AcademicRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_departments(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT department_id, code, name FROM departments ORDER BY name")
            rows = fetchall(cur)
            return [Department(department_id=int(r["department_id"]), code=r["code"], name=r["name"]) for r in rows]

    def get_semester(self, semester_id: int) -> Optional[Semester]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT semester_id, number, name, academic_year_id FROM semesters WHERE semester_id=%s",
                (int(semester_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Semester(
                semester_id=int(r["semester_id"]),
                number=int(r["number"]),
                name=r["name"],
                academic_year_id=int(r["academic_year_id"]),
            )

    def get_subject(self, subject_id: int) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT subject_id, code, name, department_id, semester_id, is_mdc
                FROM subjects
                WHERE subject_id=%s
                """,
                (int(subject_id),),
            )
            r = fetchone(cur)
            return _subject(r) if r else None

    def get_faculty(self, faculty_id: int) -> Optional[Faculty]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT faculty_id, full_name, department_id, is_active FROM faculty WHERE faculty_id=%s",
                (int(faculty_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Faculty(
                faculty_id=int(r["faculty_id"]),
                full_name=r["full_name"],
                department_id=int(r["department_id"]),
                is_active=bool(r.get("is_active", True)),
            )

    def find_mdc_subject(self, *, department_id: int, semester_number: int) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.subject_id, s.code, s.name, s.department_id, s.semester_id, s.is_mdc
                FROM subjects s
                JOIN semesters se ON se.semester_id = s.semester_id
                WHERE s.department_id=%s AND s.is_mdc=1 AND se.number=%s
                ORDER BY s.subject_id
                LIMIT 1
                """,
                (int(department_id), int(semester_number)),
            )
            r = fetchone(cur)
            return _subject(r) if r else None
