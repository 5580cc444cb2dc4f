from __future__ import annotations

import json
import queue

from flask import Flask, Response, jsonify, request

from ..common.web import api_errors, current_lecturer_id, json_error, lecturer_required, payload
from ..container import Container
from ..core.exceptions import AuthorizationError, NotFoundError
from .geolocation import resolve_location
from .links import checkin_url, render_qr_png
from .model import GeoPoint, Scan, Session, SessionWithScans

KEEPALIVE_SECONDS = 15


def _location_json(location: GeoPoint | None) -> dict:
    if location is None:
        return {"lat": None, "lng": None}
    return {"lat": location.latitude, "lng": location.longitude}


def session_json(s: Session) -> dict:
    return {
        "id": s.session_id,
        "course_id": s.course_id,
        "lecturer_id": s.lecturer_id,
        "date": s.date.strftime("%Y-%m-%d"),
        "start_time": s.start_time.strftime("%H:%M"),
        "room": s.room,
        "status": s.status.value,
        **_location_json(s.location),
    }


def scan_json(scan: Scan) -> dict:
    return {
        "id": scan.scan_id,
        "session_id": scan.session_id,
        "student_no": scan.student_no,
        "surname_initials": scan.surname_initials,
        "status": scan.status.value,
        "minutes_late": scan.minutes_late,
        "scanned_at": scan.scanned_at.isoformat(),
        **_location_json(scan.location),
    }


def state_json(state: SessionWithScans) -> dict:
    return {**session_json(state.session), "scans": [scan_json(sc) for sc in state.scans]}


def _sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def register(app: Flask, container: Container) -> None:
    sessions = container.session_service
    courses = container.course_service

    def _owned_state(session_id: str) -> SessionWithScans:
        state = sessions.get_session_state(session_id)
        if not state:
            raise NotFoundError("Session not found")
        if state.session.lecturer_id != current_lecturer_id():
            raise AuthorizationError("This is not your session")
        return state

    @app.route("/api/courses/<course_id>/sessions", methods=["POST"], endpoint="open_session")
    @lecturer_required
    @api_errors
    def open_session(course_id: str):
        data = payload()
        session = sessions.open_session(
            course_id=course_id,
            lecturer_id=current_lecturer_id(),
            room=data.get("room"),
            location=resolve_location(data.get("lat"), data.get("lng")),
        )
        body = session_json(session)
        body["checkin_url"] = checkin_url(app.config["PUBLIC_BASE_URL"], session.session_id)
        return jsonify(body), 201

    @app.route("/api/sessions/<session_id>/close", methods=["POST"], endpoint="close_session")
    @lecturer_required
    @api_errors
    def close_session(session_id: str):
        closed = sessions.close_session(session_id, lecturer_id=current_lecturer_id())
        return jsonify({"success": True, "closed": closed})

    @app.route("/api/sessions", methods=["GET"], endpoint="list_sessions")
    @lecturer_required
    @api_errors
    def list_sessions():
        course_id = request.args.get("course_id")
        if course_id:
            courses.get_owned_course(lecturer_id=current_lecturer_id(), course_id=course_id)
            items = sessions.list_sessions(course_id)
        else:
            owned = {c.course_id for c in courses.list_for_lecturer(current_lecturer_id())}
            items = [s for s in sessions.list_sessions() if s.session.course_id in owned]
        return jsonify([state_json(s) for s in items])

    @app.route("/api/sessions/active", methods=["GET"], endpoint="active_sessions")
    @lecturer_required
    @api_errors
    def active_sessions():
        return jsonify([session_json(s) for s in sessions.list_active_sessions(current_lecturer_id())])

    @app.route("/api/sessions/<session_id>", methods=["GET"], endpoint="session_state")
    @lecturer_required
    @api_errors
    def session_state(session_id: str):
        return jsonify(state_json(_owned_state(session_id)))

    @app.route("/api/sessions/<session_id>/scans", methods=["GET"], endpoint="session_scans_after")
    @lecturer_required
    @api_errors
    def session_scans_after(session_id: str):
        _owned_state(session_id)
        after_id = request.args.get("after", default=0, type=int)
        return jsonify([scan_json(sc) for sc in sessions.scans_after(session_id, after_id)])

    @app.route("/api/sessions/<session_id>/qr.png", methods=["GET"], endpoint="session_qr")
    @lecturer_required
    @api_errors
    def session_qr(session_id: str):
        _owned_state(session_id)
        png = render_qr_png(checkin_url(app.config["PUBLIC_BASE_URL"], session_id))
        return app.response_class(png, mimetype="image/png")

    @app.route("/api/sessions/<session_id>/stream", methods=["GET"], endpoint="session_stream")
    @lecturer_required
    @api_errors
    def session_stream(session_id: str):
        """Server-sent events: ``scan`` for each new check-in, ``session`` on close."""

        state = _owned_state(session_id)
        events: queue.Queue = queue.Queue()
        sub = sessions.feed.subscribe(
            session_id,
            on_scan=lambda scan: events.put(("scan", scan_json(scan))),
            on_session=lambda s: events.put(("session", session_json(s))),
        )

        def generate():
            try:
                yield _sse("session", session_json(state.session))
                if not state.session.is_active:
                    return
                while True:
                    try:
                        kind, data = events.get(timeout=KEEPALIVE_SECONDS)
                    except queue.Empty:
                        yield ": keep-alive\n\n"
                        continue
                    yield _sse(kind, data)
                    if kind == "session" and data["status"] != "active":
                        return
            finally:
                sub.unsubscribe()

        response = Response(generate(), mimetype="text/event-stream", headers={"Cache-Control": "no-cache"})
        # Covers clients that disconnect before the generator first runs.
        response.call_on_close(sub.unsubscribe)
        return response

    @app.route("/api/checkin/<session_id>", methods=["GET"], endpoint="checkin_info")
    @api_errors
    def checkin_info(session_id: str):
        """What the student's check-in page needs to know about a session."""

        state = sessions.get_session_state(session_id)
        if not state or not state.session.is_active:
            return json_error("No active session", 404, code="no_active_session")
        course = courses.get_course(state.session.course_id)
        return jsonify(
            {
                "session_id": session_id,
                "course_code": course.code,
                "course_name": course.name,
                "room": state.session.room,
                "date": state.session.date.strftime("%Y-%m-%d"),
                "start_time": state.session.start_time.strftime("%H:%M"),
            }
        )

    @app.route("/api/checkin", methods=["POST"], endpoint="checkin")
    @api_errors
    def checkin():
        data = payload()
        result = sessions.check_in(
            session_id=str(data.get("session") or ""),
            student_no=str(data.get("student_no") or ""),
            location=resolve_location(data.get("lat"), data.get("lng")),
        )
        status = 200 if result.already_recorded else 201
        return jsonify({"success": True, "already_recorded": result.already_recorded, "scan": scan_json(result.scan)}), status
