"""Schema bootstrap: create the configured database and apply ``schema.sql``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).with_name("schema.sql")

# The target database always comes from DB_CONFIG, never from the file.
_SKIPPED_PREFIXES = ("CREATE DATABASE", "USE ")


def _without_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def _split(sql: str) -> Iterator[str]:
    start = 0
    quote = None
    for i, ch in enumerate(sql):
        if quote:
            if ch == quote and sql[i - 1] != "\\":
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            yield sql[start:i]
            start = i + 1
    yield sql[start:]


def schema_statements(sql: str) -> list[str]:
    """Executable statements of a schema script, in file order.

    Whole-line ``--`` comments are dropped, semicolons inside quotes are kept,
    and ``CREATE DATABASE`` / ``USE`` statements are skipped.
    """

    out = []
    for raw in _split(_without_line_comments(sql)):
        stmt = raw.strip()
        if stmt and not stmt.upper().startswith(_SKIPPED_PREFIXES):
            out.append(stmt)
    return out


def _server_connection(target: DBConfig, *, database: str | None = None):
    return mysql.connector.connect(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        database=database,
        connection_timeout=target.connect_timeout,
    )


def ensure_database_exists(target: DBConfig) -> None:
    conn = _server_connection(target)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = DEFAULT_SCHEMA_PATH) -> None:
    """Idempotent: every table in the schema is ``CREATE TABLE IF NOT EXISTS``."""

    target = DBConfig.from_dict(db_config)
    ensure_database_exists(target)
    statements = schema_statements(Path(schema_path).read_text(encoding="utf-8"))

    conn = _server_connection(target, database=target.database)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("applied %d statements from %s to %s", len(statements), schema_path, target.database)


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _server_connection(target, database=target.database)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
    finally:
        conn.close()
