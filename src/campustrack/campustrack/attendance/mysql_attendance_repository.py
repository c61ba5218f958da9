from __future__ import annotations

from datetime import date
from typing import Optional, Sequence, Tuple

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateAttendanceError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, is_duplicate_key
from .model import AttendanceReportRow, AttendanceScope
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        scope: Optional[AttendanceScope] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        scope = scope or AttendanceScope()
        if scope.department_id is not None:
            clauses.append("st.department_id=%s")
            params.append(int(scope.department_id))
        if scope.semester_id is not None:
            clauses.append("st.semester_id=%s")
            params.append(int(scope.semester_id))
        if scope.subject_id is not None:
            clauses.append("ar.subject_id=%s")
            params.append(int(scope.subject_id))
        if scope.faculty_id is not None:
            clauses.append("ar.marked_by=%s")
            params.append(int(scope.faculty_id))
        if scope.student_id is not None:
            clauses.append("ar.student_id=%s")
            params.append(int(scope.student_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.record_id, ar.student_id, ar.subject_id, ar.marked_by,
                    ar.work_date, ar.period, ar.status,
                    st.full_name AS student_name, st.enrollment_no, st.department_id,
                    d.code AS department_code, d.name AS department_name,
                    s.code AS subject_code, s.name AS subject_name,
                    f.full_name AS faculty_name
                FROM attendance_records ar
                JOIN students st ON st.student_id = ar.student_id
                JOIN departments d ON d.department_id = st.department_id
                JOIN subjects s ON s.subject_id = ar.subject_id
                JOIN faculty f ON f.faculty_id = ar.marked_by
                WHERE {where}
                ORDER BY ar.work_date ASC, ar.record_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceReportRow(
                    record_id=int(r["record_id"]),
                    student_id=int(r["student_id"]),
                    department_id=int(r["department_id"]),
                    subject_id=int(r["subject_id"]),
                    faculty_id=int(r["marked_by"]),
                    work_date=r["work_date"],
                    period=int(r["period"]),
                    status=AttendanceStatus(r["status"]),
                    student_name=r["student_name"],
                    enrollment_no=r["enrollment_no"],
                    department_code=r["department_code"],
                    department_name=r["department_name"],
                    subject_code=r["subject_code"],
                    subject_name=r["subject_name"],
                    faculty_name=r["faculty_name"],
                )
                for r in rows
            ]

    def create_records(
        self,
        *,
        subject_id: int,
        marked_by: int,
        work_date: date,
        period: int,
        marks: Sequence[Tuple[int, AttendanceStatus]],
    ) -> int:
        params = [
            (int(student_id), int(subject_id), int(marked_by), work_date, int(period), status.value)
            for student_id, status in marks
        ]
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.executemany(
                    """
                    INSERT INTO attendance_records(student_id, subject_id, marked_by, work_date, period, status)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    params,
                )
                return len(params)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicateAttendanceError("Attendance already marked for this class") from exc
            raise NotFoundError("Unknown student in attendance list") from exc
