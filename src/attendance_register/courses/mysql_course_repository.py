from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Course
from .repository import CourseRepository

_COLUMNS = "id, lecturer_id, code, name, department, year, semester, total_planned_classes, room"


def _to_course(r: dict) -> Course:
    return Course(
        course_id=r["id"],
        lecturer_id=r["lecturer_id"],
        code=r["code"],
        name=r["name"],
        department=r.get("department") or "",
        year=int(r["year"]),
        semester=str(r.get("semester") or "1"),
        total_planned_classes=int(r.get("total_planned_classes") or 0),
        room=r.get("room") or "",
    )


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM courses ORDER BY code")
            return [_to_course(r) for r in fetchall(cur)]

    def list_for_lecturer(self, lecturer_id: str) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM courses WHERE lecturer_id=%s ORDER BY code", (lecturer_id,))
            return [_to_course(r) for r in fetchall(cur)]

    def get_by_id(self, course_id: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM courses WHERE id=%s", (course_id,))
            r = fetchone(cur)
            return _to_course(r) if r else None

    def create(self, course: Course) -> Course:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO courses({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)",
                (
                    course.course_id,
                    course.lecturer_id,
                    course.code,
                    course.name,
                    course.department,
                    course.year,
                    course.semester,
                    course.total_planned_classes,
                    course.room,
                ),
            )
        return course

    def delete_by_id(self, course_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE id=%s", (course_id,))
            return cur.rowcount > 0
