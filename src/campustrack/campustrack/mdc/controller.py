from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    mdc = container.mdc_service

    @app.route("/api/mdc/courses", methods=["POST"], endpoint="mdc_save_course")
    def save_course():
        data = json_body()
        course_id = mdc.save_course(
            course_name=data.get("course_name") or "",
            home_department_id=data.get("home_department_id"),
            mdc_department_id=data.get("mdc_department_id"),
            year=data.get("year"),
            semester_number=data.get("semester"),
            student_ids=data.get("student_ids") or [],
            faculty_id=data.get("faculty_id"),
        )
        return jsonify({"course_id": course_id})

    @app.route("/api/mdc/courses/<int:course_id>", methods=["DELETE"], endpoint="mdc_delete_course")
    def delete_course(course_id: int):
        mdc.delete_course(course_id)
        return "", 204

    @app.route("/api/mdc/faculty/<int:faculty_id>/courses", methods=["GET"], endpoint="mdc_faculty_courses")
    def faculty_courses(faculty_id: int):
        return jsonify([c.as_dict() for c in mdc.courses_for_faculty(faculty_id)])
