from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.web import api_errors, current_lecturer_id, lecturer_required
from ..container import Container
from ..statistics.model import StudentStanding
from .service import to_csv


def standing_json(st: StudentStanding) -> dict:
    return {
        "student_no": st.student_no,
        "surname_initials": st.surname_initials,
        "present": st.stats.present,
        "late": st.stats.late,
        "absent": st.stats.absent,
        "total": st.stats.total,
        "pct": st.pct,
        "standing": st.standing.value,
        "at_risk": st.at_risk,
    }


def register(app: Flask, container: Container) -> None:
    courses = container.course_service
    register_service = container.register_service

    @app.route("/api/courses/<course_id>/standings", methods=["GET"], endpoint="course_standings")
    @lecturer_required
    @api_errors
    def course_standings(course_id: str):
        courses.get_owned_course(lecturer_id=current_lecturer_id(), course_id=course_id)
        return jsonify([standing_json(st) for st in register_service.course_standings(course_id)])

    @app.route("/api/courses/<course_id>/register.csv", methods=["GET"], endpoint="course_register_csv")
    @lecturer_required
    @api_errors
    def course_register_csv(course_id: str):
        courses.get_owned_course(lecturer_id=current_lecturer_id(), course_id=course_id)
        report = register_service.build_register(course_id, lecturer_name=session.get("name"))

        csv_bytes = to_csv(report).encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={report.filename}"},
        )
