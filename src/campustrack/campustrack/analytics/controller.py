from __future__ import annotations

from flask import Flask, jsonify

from ..attendance.model import AttendanceScope
from ..common.http import arg_date, arg_int, csv_response
from ..container import Container
from ..core.constants import DEFAULT_MONTHS, DEFAULT_WEEKS

SESSION_CSV_FIELDS = ["date", "course", "subject_name", "section", "faculty", "present", "absent", "total", "percentage"]
LOW_ATTENDANCE_CSV_FIELDS = [
    "student_id",
    "student_name",
    "enrollment_no",
    "department_code",
    "subject_code",
    "subject_name",
    "present",
    "total",
    "percentage",
]


def _scope() -> AttendanceScope:
    return AttendanceScope(
        department_id=arg_int("department_id"),
        semester_id=arg_int("semester_id"),
        subject_id=arg_int("subject_id"),
        faculty_id=arg_int("faculty_id"),
    )


def register(app: Flask, container: Container) -> None:
    analytics = container.analytics_service

    @app.route("/api/analytics/overview", methods=["GET"], endpoint="analytics_overview")
    def overview():
        snapshot = analytics.overall_stats(window_end=arg_date("end"), window_days=arg_int("days"), scope=_scope())
        return jsonify(snapshot.as_dict())

    @app.route("/api/analytics/departments", methods=["GET"], endpoint="analytics_departments")
    def departments():
        rows = analytics.department_breakdown(window_end=arg_date("end"), window_days=arg_int("days"), scope=_scope())
        return jsonify([r.as_dict() for r in rows])

    @app.route("/api/analytics/weekly", methods=["GET"], endpoint="analytics_weekly")
    def weekly():
        weeks = arg_int("weeks")
        buckets = analytics.weekly_trend(
            weeks=weeks if weeks is not None else DEFAULT_WEEKS,
            anchor=arg_date("anchor"),
            scope=_scope(),
        )
        return jsonify([b.as_dict() for b in buckets])

    def _low_attendance():
        return analytics.low_attendance_students(
            window_end=arg_date("end"),
            window_days=arg_int("days"),
            limit=arg_int("limit"),
            scope=_scope(),
        )

    @app.route("/api/analytics/low-attendance", methods=["GET"], endpoint="analytics_low_attendance")
    def low_attendance():
        return jsonify([s.as_dict() for s in _low_attendance()])

    @app.route("/api/analytics/low-attendance.csv", methods=["GET"], endpoint="analytics_low_attendance_csv")
    def low_attendance_csv():
        return csv_response(
            app,
            rows=(s.as_dict() for s in _low_attendance()),
            fieldnames=LOW_ATTENDANCE_CSV_FIELDS,
            filename="low_attendance.csv",
        )

    def _recent():
        return analytics.recent_sessions(
            today=arg_date("today"),
            days=arg_int("days"),
            limit=arg_int("limit"),
            scope=_scope(),
        )

    @app.route("/api/analytics/sessions/recent", methods=["GET"], endpoint="analytics_recent_sessions")
    def recent_sessions():
        return jsonify([s.as_row() for s in _recent()])

    @app.route("/api/analytics/sessions/recent.csv", methods=["GET"], endpoint="analytics_recent_sessions_csv")
    def recent_sessions_csv():
        return csv_response(
            app,
            rows=(s.as_row() for s in _recent()),
            fieldnames=SESSION_CSV_FIELDS,
            filename="recent_sessions.csv",
        )

    @app.route("/api/analytics/sessions/today", methods=["GET"], endpoint="analytics_sessions_today")
    def sessions_today():
        sessions = analytics.sessions_on(arg_date("date"), scope=_scope())
        return jsonify([s.as_row() for s in sessions])

    @app.route("/api/analytics/students/<int:student_id>", methods=["GET"], endpoint="analytics_student_summary")
    def student_summary(student_id: int):
        summary = analytics.student_summary(
            student_id,
            semester_id=arg_int("semester_id"),
            start_date=arg_date("start"),
            end_date=arg_date("end"),
        )
        return jsonify(summary.as_dict())

    @app.route("/api/analytics/summary", methods=["GET"], endpoint="analytics_summary")
    def summary():
        return jsonify(analytics.analytics_summary(window_end=arg_date("end"), scope=_scope()).as_dict())

    @app.route("/api/analytics/monthly", methods=["GET"], endpoint="analytics_monthly")
    def monthly():
        months = arg_int("months")
        points = analytics.monthly_trend(
            months=months if months is not None else DEFAULT_MONTHS,
            anchor=arg_date("anchor"),
            scope=_scope(),
        )
        return jsonify([p.as_dict() for p in points])

    @app.route("/api/analytics/department-comparison", methods=["GET"], endpoint="analytics_department_comparison")
    def department_comparison():
        rows = analytics.department_comparison(window_end=arg_date("end"), scope=_scope())
        return jsonify([r.as_dict() for r in rows])

    @app.route("/api/analytics/weekdays", methods=["GET"], endpoint="analytics_weekdays")
    def weekdays():
        rows = analytics.attendance_by_weekday(window_end=arg_date("end"), scope=_scope())
        return jsonify([r.as_dict() for r in rows])

    @app.route("/api/analytics/distribution", methods=["GET"], endpoint="analytics_distribution")
    def distribution():
        rows = analytics.attendance_distribution(window_end=arg_date("end"), scope=_scope())
        return jsonify([r.as_dict() for r in rows])

    @app.route("/api/analytics/periods", methods=["GET"], endpoint="analytics_periods")
    def periods():
        rows = analytics.period_pattern(window_end=arg_date("end"), scope=_scope())
        return jsonify([r.as_dict() for r in rows])
