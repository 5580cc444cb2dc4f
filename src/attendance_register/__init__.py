"""Attendance Register package.

Organized by feature modules (lecturers, courses, roster, sessions, statistics,
reports) with a thin Flask controller layer over service/repository layers.
"""
