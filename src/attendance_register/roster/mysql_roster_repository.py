from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import RosterRepository


def student_key(student_no: str) -> str:
    return f"S_{student_no}"


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_student(self, *, student_no: str, surname_initials: str) -> Student:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(id, student_no, surname_initials)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE surname_initials=VALUES(surname_initials)
                """,
                (student_key(student_no), student_no, surname_initials),
            )
            # The row may predate the S_<no> id convention; read the real id back.
            cur.execute("SELECT id, student_no, surname_initials FROM students WHERE student_no=%s", (student_no,))
            r = fetchone(cur)
            return Student(student_id=r["id"], student_no=r["student_no"], surname_initials=r["surname_initials"])

    def enrol(self, *, student_id: str, course_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM enrolments WHERE student_id=%s AND course_id=%s",
                (student_id, course_id),
            )
            if fetchone(cur):
                return False
            cur.execute(
                """
                INSERT INTO enrolments(student_id, course_id)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE student_id=student_id
                """,
                (student_id, course_id),
            )
            return True

    def remove_enrolment(self, *, student_id: str, course_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM enrolments WHERE student_id=%s AND course_id=%s",
                (student_id, course_id),
            )
            return cur.rowcount > 0

    def get_by_student_no(self, student_no: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, student_no, surname_initials FROM students WHERE student_no=%s", (student_no,))
            r = fetchone(cur)
            if not r:
                return None
            return Student(student_id=r["id"], student_no=r["student_no"], surname_initials=r["surname_initials"])

    def list_for_course(self, course_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.id, s.student_no, s.surname_initials
                FROM enrolments e
                JOIN students s ON s.id = e.student_id
                WHERE e.course_id=%s
                ORDER BY s.surname_initials, s.student_no
                """,
                (course_id,),
            )
            return [
                Student(
                    student_id=r["id"],
                    student_no=r["student_no"],
                    surname_initials=r["surname_initials"],
                    course_ids=(course_id,),
                )
                for r in fetchall(cur)
            ]

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.id, s.student_no, s.surname_initials, e.course_id
                FROM students s
                LEFT JOIN enrolments e ON e.student_id = s.id
                ORDER BY s.surname_initials, s.student_no, e.course_id
                """
            )
            grouped: dict[str, dict] = {}
            for r in fetchall(cur):
                entry = grouped.setdefault(
                    r["id"],
                    {"student_no": r["student_no"], "surname_initials": r["surname_initials"], "course_ids": []},
                )
                if r.get("course_id"):
                    entry["course_ids"].append(r["course_id"])

            return [
                Student(
                    student_id=sid,
                    student_no=v["student_no"],
                    surname_initials=v["surname_initials"],
                    course_ids=tuple(v["course_ids"]),
                )
                for sid, v in grouped.items()
            ]
