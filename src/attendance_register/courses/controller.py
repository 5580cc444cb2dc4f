from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import api_errors, current_lecturer_id, lecturer_required, payload
from ..container import Container
from .model import Course


def course_json(course: Course) -> dict:
    return {
        "id": course.course_id,
        "lecturer_id": course.lecturer_id,
        "code": course.code,
        "name": course.name,
        "department": course.department,
        "year": course.year,
        "semester": course.semester,
        "total_planned_classes": course.total_planned_classes,
        "room": course.room,
    }


def register(app: Flask, container: Container) -> None:
    courses = container.course_service

    @app.route("/api/courses", methods=["GET"], endpoint="my_courses")
    @lecturer_required
    @api_errors
    def my_courses():
        return jsonify([course_json(c) for c in courses.list_for_lecturer(current_lecturer_id())])

    @app.route("/api/courses", methods=["POST"], endpoint="add_course")
    @lecturer_required
    @api_errors
    def add_course():
        data = payload()
        course = courses.create_course(
            lecturer_id=current_lecturer_id(),
            code=data.get("code", ""),
            name=data.get("name", ""),
            department=data.get("department", ""),
            year=data.get("year"),
            semester=data.get("semester"),
            total_planned_classes=data.get("total_planned_classes", 40),
            room=data.get("room"),
        )
        return jsonify(course_json(course)), 201

    @app.route("/api/courses/<course_id>", methods=["DELETE"], endpoint="delete_course")
    @lecturer_required
    @api_errors
    def delete_course(course_id: str):
        courses.delete_course(lecturer_id=current_lecturer_id(), course_id=course_id)
        return jsonify({"success": True})
