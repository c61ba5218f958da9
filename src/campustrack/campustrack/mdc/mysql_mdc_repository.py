from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MDCCourse, MDCCourseSummary
from .repository import MDCRepository

_COURSE_COLUMNS = "course_id, course_name, home_department_id, mdc_department_id, year, semester_number, faculty_id"


class MySQLMDCRepository(MDCRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _course(self, cur, r: dict) -> MDCCourse:
        cur.execute(
            "SELECT student_id FROM mdc_course_students WHERE course_id=%s ORDER BY student_id",
            (int(r["course_id"]),),
        )
        students = tuple(int(s["student_id"]) for s in fetchall(cur))
        return MDCCourse(
            course_id=int(r["course_id"]),
            course_name=r["course_name"],
            home_department_id=int(r["home_department_id"]),
            mdc_department_id=int(r["mdc_department_id"]),
            year=int(r["year"]),
            semester_number=int(r["semester_number"]),
            faculty_id=int(r["faculty_id"]) if r.get("faculty_id") is not None else None,
            student_ids=students,
        )

    def get_by_id(self, course_id: int) -> Optional[MDCCourse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COURSE_COLUMNS} FROM mdc_courses WHERE course_id=%s", (int(course_id),))
            r = fetchone(cur)
            return self._course(cur, r) if r else None

    def find_for_offering(self, *, mdc_department_id: int, semester_number: int) -> Optional[MDCCourse]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COURSE_COLUMNS}
                FROM mdc_courses
                WHERE mdc_department_id=%s AND semester_number=%s
                ORDER BY course_id
                LIMIT 1
                """,
                (int(mdc_department_id), int(semester_number)),
            )
            r = fetchone(cur)
            return self._course(cur, r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) makes lastrowid the existing id on the update path.
            cur.execute(
                """
                INSERT INTO mdc_courses(course_name, home_department_id, mdc_department_id, year, semester_number, faculty_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    course_name=VALUES(course_name),
                    faculty_id=VALUES(faculty_id),
                    course_id=LAST_INSERT_ID(course_id)
                """,
                (course_name, int(home_department_id), int(mdc_department_id), int(year), int(semester_number), faculty_id),
            )
            course_id = int(cur.lastrowid)

            cur.execute("DELETE FROM mdc_course_students WHERE course_id=%s", (course_id,))
            cur.executemany(
                "INSERT INTO mdc_course_students(course_id, student_id) VALUES(%s,%s)",
                [(course_id, int(sid)) for sid in student_ids],
            )
            return course_id

    def delete(self, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM mdc_courses WHERE course_id=%s", (int(course_id),))
            return cur.rowcount > 0

    def list_for_faculty(self, faculty_id: int) -> Sequence[MDCCourseSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT mc.course_id, mc.course_name, mc.year, mc.semester_number,
                       hd.code AS home_code, hd.name AS home_name,
                       md.code AS mdc_code, md.name AS mdc_name,
                       COUNT(ms.student_id) AS student_count
                FROM mdc_courses mc
                JOIN departments hd ON hd.department_id = mc.home_department_id
                JOIN departments md ON md.department_id = mc.mdc_department_id
                LEFT JOIN mdc_course_students ms ON ms.course_id = mc.course_id
                WHERE mc.faculty_id=%s
                GROUP BY mc.course_id, mc.course_name, mc.year, mc.semester_number,
                         hd.code, hd.name, md.code, md.name
                ORDER BY mc.year ASC, mc.semester_number ASC
                """,
                (int(faculty_id),),
            )
            rows = fetchall(cur)
            return [
                MDCCourseSummary(
                    course_id=int(r["course_id"]),
                    course_name=r["course_name"],
                    year=int(r["year"]),
                    semester_number=int(r["semester_number"]),
                    student_count=int(r["student_count"]),
                    home_department_code=r["home_code"],
                    home_department_name=r["home_name"],
                    mdc_department_code=r["mdc_code"],
                    mdc_department_name=r["mdc_name"],
                )
                for r in rows
            ]
