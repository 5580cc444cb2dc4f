from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Lecturer
from .repository import LecturerRepository


class MySQLLecturerRepository(LecturerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _load_hashes(cur, lecturer_ids: Sequence[str]) -> dict[str, list[str]]:
        by_lecturer: dict[str, list[str]] = {lid: [] for lid in lecturer_ids}
        if not lecturer_ids:
            return by_lecturer
        cur.execute(
            f"""
            SELECT lecturer_id, password_hash
            FROM lecturer_passwords
            WHERE lecturer_id IN ({in_clause(lecturer_ids)})
            ORDER BY lecturer_id, slot
            """,
            tuple(lecturer_ids),
        )
        for r in fetchall(cur):
            by_lecturer[r["lecturer_id"]].append(r["password_hash"])
        return by_lecturer

    @staticmethod
    def _to_lecturer(r: dict, hashes: Sequence[str]) -> Lecturer:
        return Lecturer(
            lecturer_id=r["id"],
            name=r["name"],
            email=r["email"],
            department=r.get("department") or "",
            password_hashes=tuple(hashes),
        )

    def list_all(self) -> Sequence[Lecturer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, email, department FROM lecturers ORDER BY name")
            rows = fetchall(cur)
            hashes = self._load_hashes(cur, [r["id"] for r in rows])
            return [self._to_lecturer(r, hashes[r["id"]]) for r in rows]

    def _get_where(self, clause: str, value: str) -> Optional[Lecturer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, name, email, department FROM lecturers WHERE {clause}", (value,))
            r = fetchone(cur)
            if not r:
                return None
            hashes = self._load_hashes(cur, [r["id"]])
            return self._to_lecturer(r, hashes[r["id"]])

    def get_by_id(self, lecturer_id: str) -> Optional[Lecturer]:
        return self._get_where("id=%s", lecturer_id)

    def get_by_email(self, email: str) -> Optional[Lecturer]:
        return self._get_where("LOWER(email)=LOWER(%s)", email)

    def create(
        self,
        *,
        lecturer_id: str,
        name: str,
        email: str,
        department: str,
        password_hashes: Sequence[str],
    ) -> Lecturer:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO lecturers(id, name, email, department) VALUES(%s,%s,%s,%s)",
                (lecturer_id, name, email, department),
            )
            cur.executemany(
                "INSERT INTO lecturer_passwords(lecturer_id, slot, password_hash) VALUES(%s,%s,%s)",
                [(lecturer_id, slot, h) for slot, h in enumerate(password_hashes, start=1)],
            )
        return Lecturer(
            lecturer_id=lecturer_id,
            name=name,
            email=email,
            department=department,
            password_hashes=tuple(password_hashes),
        )

    def replace_passwords(self, lecturer_id: str, password_hashes: Sequence[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM lecturers WHERE id=%s FOR UPDATE", (lecturer_id,))
            if not fetchone(cur):
                return False
            cur.execute("DELETE FROM lecturer_passwords WHERE lecturer_id=%s", (lecturer_id,))
            cur.executemany(
                "INSERT INTO lecturer_passwords(lecturer_id, slot, password_hash) VALUES(%s,%s,%s)",
                [(lecturer_id, slot, h) for slot, h in enumerate(password_hashes, start=1)],
            )
            return True

    def delete_by_id(self, lecturer_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM lecturers WHERE id=%s", (lecturer_id,))
            return cur.rowcount > 0
