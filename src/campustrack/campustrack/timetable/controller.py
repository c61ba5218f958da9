from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import arg_int, json_body
from ..container import Container
from ..core.exceptions import ValidationError
from .model import SlotDraft
from .service import KEEP


def register(app: Flask, container: Container) -> None:
    timetable = container.timetable_service

    def _slot(data: dict):
        return timetable.make_slot(
            department_id=data.get("department_id"),
            semester_id=data.get("semester_id"),
            academic_year_id=data.get("academic_year_id"),
            day_of_week=data.get("day_of_week"),
            period=data.get("period"),
        )

    def _draft(data: dict) -> SlotDraft:
        return SlotDraft(
            slot=_slot(data),
            entry_id=data.get("entry_id"),
            subject_id=data.get("subject_id"),
            faculty_id=data.get("faculty_id"),
            room=data.get("room"),
            mdc_course_id=data.get("mdc_course_id"),
            course_name=data.get("course_name") or "",
        )

    @app.route("/api/timetable/grid", methods=["GET"], endpoint="timetable_grid")
    def grid():
        department_id = arg_int("department_id")
        semester_id = arg_int("semester_id")
        if department_id is None or semester_id is None:
            raise ValidationError("department_id and semester_id are required")
        result = timetable.get_grid(department_id, semester_id, arg_int("academic_year_id"))
        return jsonify(result.as_dict())

    @app.route("/api/timetable/entries", methods=["POST"], endpoint="timetable_add_entry")
    def add_entry():
        data = json_body()
        entry = timetable.add_entry(
            _slot(data),
            subject_id=data.get("subject_id"),
            faculty_id=data.get("faculty_id"),
            room=data.get("room"),
        )
        return jsonify(entry.as_dict()), 201

    @app.route("/api/timetable/entries/<int:entry_id>", methods=["PATCH"], endpoint="timetable_update_entry")
    def update_entry(entry_id: int):
        data = json_body()
        entry = timetable.update_entry(
            entry_id,
            subject_id=data.get("subject_id"),
            faculty_id=data.get("faculty_id"),
            room=data["room"] if "room" in data else KEEP,
        )
        return jsonify(entry.as_dict())

    @app.route("/api/timetable/entries/<int:entry_id>", methods=["DELETE"], endpoint="timetable_delete_entry")
    def delete_entry(entry_id: int):
        timetable.delete_entry(entry_id)
        return "", 204

    @app.route("/api/timetable/mdc-toggle", methods=["POST"], endpoint="timetable_toggle_mdc")
    def toggle_mdc():
        data = json_body()
        draft = _draft(data) if data.get("draft") else None
        result = timetable.toggle_mdc(_slot(data), bool(data.get("enabled")), draft=draft)
        return jsonify(result.as_dict())

    @app.route("/api/timetable/drafts", methods=["POST"], endpoint="timetable_save_draft")
    def save_draft():
        entry = timetable.save_draft(_draft(json_body()))
        return jsonify(entry.as_dict())

    @app.route("/api/timetable/classes-count", methods=["GET"], endpoint="timetable_classes_count")
    def classes_count():
        return jsonify({"classes": timetable.classes_count()})
