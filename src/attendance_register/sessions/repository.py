from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ScanStatus
from .model import GeoPoint, Scan, Session, SessionWithScans


class SessionRepository(Protocol):
    def create(self, session: Session) -> Session:
        raise NotImplementedError

    def get_by_id(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def close(self, session_id: str) -> bool:
        """active -> closed. Returns False when nothing changed."""

        raise NotImplementedError

    def get_with_scans(self, session_id: str) -> Optional[SessionWithScans]:
        raise NotImplementedError

    def list_with_scans(self, *, course_id: Optional[str] = None) -> Sequence[SessionWithScans]:
        """Sessions by date descending, each with its scans (most recent first)."""

        raise NotImplementedError

    def list_active_for_lecturer(self, lecturer_id: str) -> Sequence[Session]:
        raise NotImplementedError


class ScanRepository(Protocol):
    def get_for_session_and_student(self, session_id: str, student_no: str) -> Optional[Scan]:
        raise NotImplementedError

    def create(
        self,
        *,
        session_id: str,
        student_no: str,
        surname_initials: str,
        status: ScanStatus,
        minutes_late: int,
        scanned_at: datetime,
        location: Optional[GeoPoint] = None,
    ) -> Scan:
        """Insert a scan.

        Raises DuplicateKeyError when (session_id, student_no) already exists.
        """

        raise NotImplementedError

    def list_after(self, session_id: str, after_id: int) -> Sequence[Scan]:
        """Scans with id > after_id, in insertion order."""

        raise NotImplementedError
