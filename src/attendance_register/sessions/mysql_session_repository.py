from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ScanStatus, SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_time, optional_float
from .model import GeoPoint, Scan, Session, SessionWithScans
from .repository import ScanRepository, SessionRepository

_SESSION_COLUMNS = "id, course_id, lecturer_id, date, start_time, room, lat, lng, status"
_SCAN_COLUMNS = "id, session_id, student_no, surname_initials, status, minutes_late, lat, lng, scanned_at"


def _location(r: dict) -> Optional[GeoPoint]:
    lat, lng = optional_float(r.get("lat")), optional_float(r.get("lng"))
    if lat is None or lng is None:
        return None
    return GeoPoint(latitude=lat, longitude=lng)


def _to_session(r: dict) -> Session:
    return Session(
        session_id=r["id"],
        course_id=r["course_id"],
        lecturer_id=r["lecturer_id"],
        date=r["date"],
        start_time=normalize_mysql_time(r["start_time"]),
        room=r.get("room") or "",
        status=SessionStatus(r["status"]),
        location=_location(r),
    )


def _to_scan(r: dict) -> Scan:
    return Scan(
        scan_id=int(r["id"]),
        session_id=r["session_id"],
        student_no=r["student_no"],
        surname_initials=r.get("surname_initials") or "",
        status=ScanStatus(r["status"]),
        minutes_late=int(r.get("minutes_late") or 0),
        scanned_at=r["scanned_at"],
        location=_location(r),
    )


def _attach_scans(cur, sessions: list[Session]) -> list[SessionWithScans]:
    if not sessions:
        return []
    ids = [s.session_id for s in sessions]
    cur.execute(
        f"""
        SELECT {_SCAN_COLUMNS}
        FROM scans
        WHERE session_id IN ({in_clause(ids)})
        ORDER BY scanned_at DESC, id DESC
        """,
        tuple(ids),
    )
    by_session: dict[str, list[Scan]] = {sid: [] for sid in ids}
    for r in fetchall(cur):
        by_session[r["session_id"]].append(_to_scan(r))
    return [SessionWithScans(session=s, scans=tuple(by_session[s.session_id])) for s in sessions]


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, session: Session) -> Session:
        loc = session.location
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO sessions({_SESSION_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)",
                (
                    session.session_id,
                    session.course_id,
                    session.lecturer_id,
                    session.date,
                    session.start_time,
                    session.room,
                    loc.latitude if loc else None,
                    loc.longitude if loc else None,
                    session.status.value,
                ),
            )
        return session

    def get_by_id(self, session_id: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM sessions WHERE id=%s", (session_id,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def close(self, session_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # Guarded on status so a closed session is never touched again.
            cur.execute(
                "UPDATE sessions SET status=%s WHERE id=%s AND status=%s",
                (SessionStatus.CLOSED.value, session_id, SessionStatus.ACTIVE.value),
            )
            return cur.rowcount > 0

    def get_with_scans(self, session_id: str) -> Optional[SessionWithScans]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM sessions WHERE id=%s", (session_id,))
            r = fetchone(cur)
            if not r:
                return None
            return _attach_scans(cur, [_to_session(r)])[0]

    def list_with_scans(self, *, course_id: Optional[str] = None) -> Sequence[SessionWithScans]:
        where = "WHERE course_id=%s" if course_id is not None else ""
        params = (course_id,) if course_id is not None else ()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM sessions
                {where}
                ORDER BY date DESC, start_time DESC, created_at DESC
                """,
                params,
            )
            sessions = [_to_session(r) for r in fetchall(cur)]
            return _attach_scans(cur, sessions)

    def list_active_for_lecturer(self, lecturer_id: str) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM sessions
                WHERE lecturer_id=%s AND status=%s
                ORDER BY date DESC, start_time DESC
                """,
                (lecturer_id, SessionStatus.ACTIVE.value),
            )
            return [_to_session(r) for r in fetchall(cur)]


class MySQLScanRepository(ScanRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_session_and_student(self, session_id: str, student_no: str) -> Optional[Scan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SCAN_COLUMNS} FROM scans WHERE session_id=%s AND student_no=%s",
                (session_id, student_no),
            )
            r = fetchone(cur)
            return _to_scan(r) if r else None

    def create(
        self,
        *,
        session_id: str,
        student_no: str,
        surname_initials: str,
        status: ScanStatus,
        minutes_late: int,
        scanned_at,
        location: Optional[GeoPoint] = None,
    ) -> Scan:
        # Plain INSERT: the UNIQUE (session_id, student_no) key is what settles
        # concurrent check-ins; db_cursor turns the rejection into DuplicateKeyError.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO scans(session_id, student_no, surname_initials, status, minutes_late, lat, lng, scanned_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    session_id,
                    student_no,
                    surname_initials,
                    status.value,
                    int(minutes_late),
                    location.latitude if location else None,
                    location.longitude if location else None,
                    scanned_at,
                ),
            )
            scan_id = int(cur.lastrowid)
        return Scan(
            scan_id=scan_id,
            session_id=session_id,
            student_no=student_no,
            surname_initials=surname_initials,
            status=status,
            minutes_late=int(minutes_late),
            scanned_at=scanned_at,
            location=location,
        )

    def list_after(self, session_id: str, after_id: int) -> Sequence[Scan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SCAN_COLUMNS} FROM scans WHERE session_id=%s AND id>%s ORDER BY id ASC",
                (session_id, int(after_id)),
            )
            return [_to_scan(r) for r in fetchall(cur)]
