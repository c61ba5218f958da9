from __future__ import annotations

from dataclasses import dataclass

from .academics.mysql_academic_repository import MySQLAcademicRepository
from .analytics.service import AnalyticsService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .colors.mysql_color_repository import MySQLColorRepository
from .colors.service import ColorRegistry
from .core.constants import (
    DEFAULT_LOW_ATTENDANCE_LIMIT,
    DEFAULT_RECENT_SESSIONS_DAYS,
    DEFAULT_RECENT_SESSIONS_LIMIT,
    DEFAULT_WINDOW_DAYS,
)
from .database.connection import DBConfig, DatabaseConnection
from .mdc.mysql_mdc_repository import MySQLMDCRepository
from .mdc.service import MDCService
from .timetable.mysql_timetable_repository import MySQLTimetableRepository
from .timetable.service import TimetableService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    academics_repo: MySQLAcademicRepository
    attendance_repo: MySQLAttendanceRepository
    timetable_repo: MySQLTimetableRepository
    mdc_repo: MySQLMDCRepository
    colors_repo: MySQLColorRepository

    color_registry: ColorRegistry
    attendance_service: AttendanceService
    analytics_service: AnalyticsService
    timetable_service: TimetableService
    mdc_service: MDCService


def build_container(*, db_config: dict, analytics: dict | None = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connect_timeout=int(db_config.get("connect_timeout", 10)),
    )
    conn = DatabaseConnection(config)
    analytics = analytics or {}

    academics_repo = MySQLAcademicRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    timetable_repo = MySQLTimetableRepository(conn)
    mdc_repo = MySQLMDCRepository(conn)
    colors_repo = MySQLColorRepository(conn)

    color_registry = ColorRegistry(colors_repo)
    attendance_service = AttendanceService(attendance_repo, academics_repo, timetable_repo)
    analytics_service = AnalyticsService(
        attendance_repo,
        academics_repo,
        timetable_repo,
        window_days=analytics.get("window_days", DEFAULT_WINDOW_DAYS),
        low_attendance_limit=analytics.get("low_attendance_limit", DEFAULT_LOW_ATTENDANCE_LIMIT),
        recent_days=analytics.get("recent_days", DEFAULT_RECENT_SESSIONS_DAYS),
        recent_limit=analytics.get("recent_limit", DEFAULT_RECENT_SESSIONS_LIMIT),
    )
    timetable_service = TimetableService(timetable_repo, academics_repo, mdc_repo, color_registry)
    mdc_service = MDCService(mdc_repo)

    return Container(
        conn=conn,
        academics_repo=academics_repo,
        attendance_repo=attendance_repo,
        timetable_repo=timetable_repo,
        mdc_repo=mdc_repo,
        colors_repo=colors_repo,
        color_registry=color_registry,
        attendance_service=attendance_service,
        analytics_service=analytics_service,
        timetable_service=timetable_service,
        mdc_service=mdc_service,
    )
