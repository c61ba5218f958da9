from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

import mysql.connector

from ..common.app_logging import get_logger
from ..core.exceptions import NotFoundError, SlotOccupiedError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import MDCSaveResult, TimetableEntry, TimetableEntryView, TimetableSlot
from .repository import TimetableRepository

_logger = get_logger("campustrack.timetable.store")

_ENTRY_COLUMNS = """
    te.entry_id, te.department_id, te.semester_id, te.academic_year_id,
    te.day_of_week, te.period, te.subject_id, te.faculty_id, te.room, te.mdc_course_id
"""

_INSERT_ENTRY = """
    INSERT INTO timetable_entries(
        department_id, semester_id, academic_year_id, day_of_week, period,
        subject_id, faculty_id, room, mdc_course_id
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""

Pair = Tuple[int, int]


def _entry(r: dict) -> TimetableEntry:
    return TimetableEntry(
        entry_id=int(r["entry_id"]),
        slot=TimetableSlot(
            department_id=int(r["department_id"]),
            semester_id=int(r["semester_id"]),
            academic_year_id=int(r["academic_year_id"]),
            day_of_week=int(r["day_of_week"]),
            period=int(r["period"]),
        ),
        subject_id=int(r["subject_id"]),
        faculty_id=int(r["faculty_id"]),
        room=r.get("room"),
        mdc_course_id=int(r["mdc_course_id"]) if r.get("mdc_course_id") is not None else None,
    )


def _translate_integrity(exc: mysql.connector.IntegrityError) -> Exception:
    if is_duplicate_key(exc):
        return SlotOccupiedError("Timetable slot is already occupied")
    return NotFoundError("Referenced subject, faculty or course does not exist")


def _insert_params(slot: TimetableSlot, subject_id: int, faculty_id: int, room, mdc_course_id) -> tuple:
    return (
        slot.department_id,
        slot.semester_id,
        slot.academic_year_id,
        slot.day_of_week,
        slot.period,
        int(subject_id),
        int(faculty_id),
        room,
        int(mdc_course_id) if mdc_course_id is not None else None,
    )


def _locked_pair(cur, entry_id: int) -> Optional[Pair]:
    cur.execute(
        "SELECT faculty_id, subject_id FROM timetable_entries WHERE entry_id=%s FOR UPDATE",
        (int(entry_id),),
    )
    r = fetchone(cur)
    return (int(r["faculty_id"]), int(r["subject_id"])) if r else None


def _link_pair(cur, *, faculty_id: int, subject_id: int) -> None:
    cur.execute(
        "INSERT IGNORE INTO faculty_subjects(faculty_id, subject_id) VALUES(%s,%s)",
        (int(faculty_id), int(subject_id)),
    )


def _release_pairs(cur, pairs: Iterable[Pair]) -> None:
    # A teaching mapping lives exactly as long as some entry still uses it.
    for faculty_id, subject_id in pairs:
        cur.execute(
            """
            DELETE FROM faculty_subjects
            WHERE faculty_id=%s AND subject_id=%s
              AND NOT EXISTS (
                  SELECT 1 FROM timetable_entries te WHERE te.faculty_id=%s AND te.subject_id=%s
              )
            """,
            (faculty_id, subject_id, faculty_id, subject_id),
        )


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ENTRY_COLUMNS} FROM timetable_entries te WHERE te.entry_id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _entry(r) if r else None

    def get_for_slot(self, slot: TimetableSlot) -> Optional[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM timetable_entries te
                WHERE te.department_id=%s AND te.semester_id=%s AND te.academic_year_id=%s
                  AND te.day_of_week=%s AND te.period=%s
                """,
                (slot.department_id, slot.semester_id, slot.academic_year_id, slot.day_of_week, slot.period),
            )
            r = fetchone(cur)
            return _entry(r) if r else None

    def insert(
        self,
        *,
        slot: TimetableSlot,
        subject_id: int,
        faculty_id: int,
        room: Optional[str] = None,
        mdc_course_id: Optional[int] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_INSERT_ENTRY, _insert_params(slot, subject_id, faculty_id, room, mdc_course_id))
                entry_id = int(cur.lastrowid)
                _link_pair(cur, faculty_id=faculty_id, subject_id=subject_id)
                return entry_id
        except mysql.connector.IntegrityError as exc:
            raise _translate_integrity(exc) from exc

    def update(
        self,
        *,
        entry_id: int,
        subject_id: int,
        faculty_id: int,
        room: Optional[str],
        mdc_course_id: Optional[int] = None,
    ) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                previous = _locked_pair(cur, entry_id)
                if previous is None:
                    return False
                cur.execute(
                    """
                    UPDATE timetable_entries
                    SET subject_id=%s, faculty_id=%s, room=%s, mdc_course_id=%s
                    WHERE entry_id=%s
                    """,
                    (int(subject_id), int(faculty_id), room, mdc_course_id, int(entry_id)),
                )
                _link_pair(cur, faculty_id=faculty_id, subject_id=subject_id)
                if previous != (int(faculty_id), int(subject_id)):
                    _release_pairs(cur, [previous])
                return True
        except mysql.connector.IntegrityError as exc:
            raise _translate_integrity(exc) from exc

    def delete(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            previous = _locked_pair(cur, entry_id)
            if previous is None:
                return False
            cur.execute("DELETE FROM timetable_entries WHERE entry_id=%s", (int(entry_id),))
            _release_pairs(cur, [previous])
            return True

    def list_for_grid(
        self,
        *,
        department_id: int,
        semester_id: int,
        academic_year_id: int,
    ) -> Sequence[TimetableEntryView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS},
                       s.code AS subject_code, s.name AS subject_name, f.full_name AS faculty_name
                FROM timetable_entries te
                JOIN subjects s ON s.subject_id = te.subject_id
                JOIN faculty f ON f.faculty_id = te.faculty_id
                WHERE te.department_id=%s AND te.semester_id=%s AND te.academic_year_id=%s
                ORDER BY te.day_of_week, te.period
                """,
                (int(department_id), int(semester_id), int(academic_year_id)),
            )
            rows = fetchall(cur)
            return [
                TimetableEntryView(
                    entry=_entry(r),
                    subject_code=r["subject_code"],
                    subject_name=r["subject_name"],
                    faculty_name=r["faculty_name"],
                )
                for r in rows
            ]

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM timetable_entries")
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def has_subject_on_day(self, *, subject_id: int, day_of_week: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS hit FROM timetable_entries WHERE subject_id=%s AND day_of_week=%s LIMIT 1",
                (int(subject_id), int(day_of_week)),
            )
            return fetchone(cur) is not None

    def save_mdc_entry(
        self,
        *,
        slot: TimetableSlot,
        entry_id: Optional[int],
        subject_id: int,
        faculty_id: int,
        room: Optional[str],
        mdc_course_id: int,
        mdc_department_id: int,
        semester_number: int,
    ) -> MDCSaveResult:
        offering = (int(mdc_department_id), int(semester_number))
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                released: set[Pair] = set()
                cur.execute(
                    """
                    SELECT DISTINCT te.faculty_id, te.subject_id
                    FROM timetable_entries te
                    JOIN mdc_courses mc ON mc.course_id = te.mdc_course_id
                    WHERE mc.mdc_department_id=%s AND mc.semester_number=%s
                    FOR UPDATE
                    """,
                    offering,
                )
                released.update((int(r["faculty_id"]), int(r["subject_id"])) for r in fetchall(cur))

                if entry_id is None:
                    cur.execute(_INSERT_ENTRY, _insert_params(slot, subject_id, faculty_id, room, mdc_course_id))
                    saved_id = int(cur.lastrowid)
                else:
                    previous = _locked_pair(cur, entry_id)
                    if previous is None:
                        raise NotFoundError("Timetable entry not found")
                    released.add(previous)
                    cur.execute(
                        """
                        UPDATE timetable_entries
                        SET subject_id=%s, faculty_id=%s, room=%s, mdc_course_id=%s
                        WHERE entry_id=%s
                        """,
                        (int(subject_id), int(faculty_id), room, int(mdc_course_id), int(entry_id)),
                    )
                    saved_id = int(entry_id)

                cur.execute(
                    "UPDATE mdc_courses SET faculty_id=%s WHERE mdc_department_id=%s AND semester_number=%s",
                    (int(faculty_id), *offering),
                )
                cur.execute(
                    """
                    UPDATE timetable_entries te
                    JOIN mdc_courses mc ON mc.course_id = te.mdc_course_id
                    SET te.faculty_id=%s
                    WHERE mc.mdc_department_id=%s AND mc.semester_number=%s AND te.entry_id<>%s
                    """,
                    (int(faculty_id), *offering, saved_id),
                )
                propagated = int(cur.rowcount)
                cur.execute(
                    """
                    INSERT IGNORE INTO faculty_subjects(faculty_id, subject_id)
                    SELECT DISTINCT %s, te.subject_id
                    FROM timetable_entries te
                    JOIN mdc_courses mc ON mc.course_id = te.mdc_course_id
                    WHERE mc.mdc_department_id=%s AND mc.semester_number=%s
                    """,
                    (int(faculty_id), *offering),
                )
                _release_pairs(cur, sorted(released))
        except mysql.connector.IntegrityError as exc:
            raise _translate_integrity(exc) from exc

        _logger.info(
            "mdc faculty propagated",
            extra={"entry_id": saved_id, "mdc_course_id": mdc_course_id, "propagated": propagated},
        )
        return MDCSaveResult(entry_id=saved_id, propagated=propagated)
