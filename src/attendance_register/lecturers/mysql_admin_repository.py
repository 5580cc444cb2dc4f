from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AdminConfig
from .repository import AdminRepository


class MySQLAdminRepository(AdminRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[AdminConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT username, password_hash, initialized FROM admin_config WHERE id=1")
            r = fetchone(cur)
            if not r:
                return None
            return AdminConfig(
                username=r["username"],
                password_hash=r["password_hash"],
                initialized=bool(r["initialized"]),
            )

    def save(self, *, username: str, password_hash: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO admin_config(id, username, password_hash, initialized)
                VALUES(1, %s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    username=VALUES(username),
                    password_hash=VALUES(password_hash),
                    initialized=1
                """,
                (username, password_hash),
            )

    def update_password(self, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE admin_config SET password_hash=%s WHERE id=1", (password_hash,))
            return cur.rowcount > 0
