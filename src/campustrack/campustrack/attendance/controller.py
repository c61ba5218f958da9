from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/sessions", methods=["POST"], endpoint="attendance_mark_session")
    def mark_session():
        data = json_body()
        marks = data.get("marks")
        if not isinstance(marks, dict):
            raise ValidationError("marks must map student ids to PRESENT or ABSENT")

        try:
            parsed_marks = {int(student_id): status for student_id, status in marks.items()}
        except (TypeError, ValueError):
            raise ValidationError("Student ids must be numbers")

        session = container.attendance_service.mark_session(
            subject_id=data.get("subject_id"),
            faculty_id=data.get("faculty_id"),
            work_date=parse_iso_date(data.get("date")),
            period=data.get("period"),
            marks=parsed_marks,
        )
        return jsonify(session.as_row()), 201
