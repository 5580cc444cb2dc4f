from __future__ import annotations

import io

from flask import Flask, jsonify, request

from ..common.web import api_errors, current_lecturer_id, lecturer_required, payload
from ..container import Container
from .importer import parse_student_rows, read_students_csv
from .model import Student


def student_json(student: Student) -> dict:
    return {
        "id": student.student_id,
        "student_no": student.student_no,
        "surname_initials": student.surname_initials,
        "course_ids": list(student.course_ids),
    }


def register(app: Flask, container: Container) -> None:
    roster = container.roster_service
    courses = container.course_service

    def _own(course_id: str) -> None:
        courses.get_owned_course(lecturer_id=current_lecturer_id(), course_id=course_id)

    @app.route("/api/courses/<course_id>/students", methods=["GET"], endpoint="course_students")
    @lecturer_required
    @api_errors
    def course_students(course_id: str):
        _own(course_id)
        return jsonify([student_json(s) for s in roster.list_for_course(course_id)])

    @app.route("/api/courses/<course_id>/students", methods=["POST"], endpoint="add_student")
    @lecturer_required
    @api_errors
    def add_student(course_id: str):
        _own(course_id)
        data = payload()
        student = roster.add_student(
            course_id=course_id,
            student_no=data.get("student_no", ""),
            surname_initials=data.get("surname_initials", ""),
        )
        return jsonify(student_json(student)), 201

    @app.route("/api/courses/<course_id>/students/upload", methods=["POST"], endpoint="upload_students")
    @lecturer_required
    @api_errors
    def upload_students(course_id: str):
        """Accepts a CSV file (``file``) or JSON ``{"rows": [[no, name], ...]}``."""

        _own(course_id)
        upload = request.files.get("file")
        if upload is not None:
            rows = read_students_csv(io.TextIOWrapper(upload.stream, encoding="utf-8-sig"))
        else:
            rows = parse_student_rows(payload().get("rows") or [])

        summary = roster.upload_students(course_id=course_id, rows=rows)
        return jsonify(
            {
                "success": True,
                "added": summary.added,
                "already_enrolled": summary.already_enrolled,
                "invalid": summary.invalid,
            }
        )

    @app.route(
        "/api/courses/<course_id>/students/<student_id>",
        methods=["DELETE"],
        endpoint="remove_student",
    )
    @lecturer_required
    @api_errors
    def remove_student(course_id: str, student_id: str):
        _own(course_id)
        roster.remove_from_course(student_id=student_id, course_id=course_id)
        return jsonify({"success": True})

    @app.route("/api/students", methods=["GET"], endpoint="all_students")
    @lecturer_required
    @api_errors
    def all_students():
        return jsonify([student_json(s) for s in roster.list_all()])
