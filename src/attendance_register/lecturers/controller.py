from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.web import admin_required, api_errors, payload
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import Lecturer, LecturerCredentials


def lecturer_json(lecturer: Lecturer) -> dict:
    return {
        "id": lecturer.lecturer_id,
        "name": lecturer.name,
        "email": lecturer.email,
        "department": lecturer.department,
    }


def credentials_json(creds: LecturerCredentials) -> dict:
    return {**lecturer_json(creds.lecturer), "passwords": list(creds.passwords)}


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    lecturers = container.lecturer_service

    @app.route("/api/setup", methods=["GET"], endpoint="setup_status")
    @api_errors
    def setup_status():
        return jsonify({"initialized": auth.is_initialized()})

    @app.route("/api/setup", methods=["POST"], endpoint="setup_admin")
    @api_errors
    def setup_admin():
        data = payload()
        auth.setup_admin(
            username=data.get("username", ""),
            password=data.get("password", ""),
            confirm=data.get("confirm", ""),
        )
        return jsonify({"success": True}), 201

    @app.route("/api/login", methods=["POST"], endpoint="login")
    @api_errors
    def login():
        data = payload()
        role = data.get("role", "")
        identifier = data.get("id", "")
        password = data.get("password", "")

        session.clear()
        if role == Role.ADMIN.value:
            admin = auth.authenticate_admin(identifier, password)
            session["role"] = Role.ADMIN.value
            session["name"] = admin.username
        elif role == Role.LECTURER.value:
            lecturer = auth.authenticate_lecturer(identifier, password)
            session["role"] = Role.LECTURER.value
            session["lecturer_id"] = lecturer.lecturer_id
            session["name"] = lecturer.name
        else:
            raise ValidationError("Unknown role")

        return jsonify({"success": True, "role": session["role"], "name": session["name"]})

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/admin/lecturers", methods=["GET"], endpoint="admin_lecturers")
    @admin_required
    @api_errors
    def admin_lecturers():
        return jsonify([lecturer_json(lec) for lec in lecturers.list_lecturers()])

    @app.route("/api/admin/lecturers", methods=["POST"], endpoint="add_lecturer")
    @admin_required
    @api_errors
    def add_lecturer():
        data = payload()
        creds = lecturers.create_lecturer(
            name=data.get("name", ""),
            email=data.get("email", ""),
            department=data.get("department", ""),
        )
        return jsonify(credentials_json(creds)), 201

    @app.route("/api/admin/lecturers/<lecturer_id>/passwords", methods=["POST"], endpoint="regenerate_passwords")
    @admin_required
    @api_errors
    def regenerate_passwords(lecturer_id: str):
        return jsonify(credentials_json(lecturers.regenerate_passwords(lecturer_id)))

    @app.route("/api/admin/lecturers/<lecturer_id>", methods=["DELETE"], endpoint="delete_lecturer")
    @admin_required
    @api_errors
    def delete_lecturer(lecturer_id: str):
        lecturers.delete_lecturer(lecturer_id)
        return jsonify({"success": True})

    @app.route("/api/admin/password", methods=["POST"], endpoint="change_admin_password")
    @admin_required
    @api_errors
    def change_admin_password():
        data = payload()
        auth.change_admin_password(
            current=data.get("current", ""),
            new=data.get("new", ""),
            confirm=data.get("confirm", ""),
        )
        session.clear()
        return jsonify({"success": True, "message": "Password updated! Please sign in again."})
