from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import minutes_between, now_local, truncate_to_minute
from ..common.ids import gen_id
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_ROOM
from ..core.enums import SessionStatus
from ..core.exceptions import (
    AuthorizationError,
    DuplicateKeyError,
    NoActiveSessionError,
    NotFoundError,
    StoreError,
)
from ..courses.repository import CourseRepository
from ..roster.repository import RosterRepository
from .factory import ScanStrategyFactory
from .feed import ChangeFeed
from .geolocation import CAMPUS_FALLBACK
from .model import CheckInResult, GeoPoint, Scan, Session, SessionWithScans
from .repository import ScanRepository, SessionRepository

logger = logging.getLogger(__name__)


class SessionService:
    """Attendance session lifecycle and student check-in.

    Every read goes to the store; nothing here caches sessions or scans.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        scans: ScanRepository,
        courses: CourseRepository,
        roster: RosterRepository,
        feed: ChangeFeed,
        *,
        strategy_factory: ScanStrategyFactory | None = None,
    ):
        self._sessions = sessions
        self._scans = scans
        self._courses = courses
        self._roster = roster
        self._feed = feed
        self._factory = strategy_factory or ScanStrategyFactory()

    @property
    def feed(self) -> ChangeFeed:
        return self._feed

    def open_session(
        self,
        *,
        course_id: str,
        lecturer_id: str,
        room: Optional[str] = None,
        location: Optional[GeoPoint] = None,
        now: datetime | None = None,
    ) -> Session:
        now = now or now_local()

        course = self._courses.get_by_id(course_id)
        if not course:
            raise NotFoundError("Course not found")
        if course.lecturer_id != lecturer_id:
            raise AuthorizationError("You do not teach this course")

        session = Session(
            session_id=gen_id(),
            course_id=course_id,
            lecturer_id=lecturer_id,
            date=now.date(),
            start_time=truncate_to_minute(now.time()),
            room=(room or "").strip() or course.room or DEFAULT_ROOM,
            status=SessionStatus.ACTIVE,
            location=location or CAMPUS_FALLBACK,
        )
        self._sessions.create(session)
        logger.info("session %s opened for course %s in %s", session.session_id, course.code, session.room)
        return session

    def close_session(self, session_id: str, *, lecturer_id: Optional[str] = None) -> bool:
        """Close an active session.

        Returns True when this call closed it. Missing or already closed
        sessions, and store failures, leave the caller unaffected. With
        ``lecturer_id`` only the owning lecturer may close it.
        """

        try:
            session = self._sessions.get_by_id(session_id)
        except StoreError:
            logger.exception("failed to read session %s before closing", session_id)
            return False

        if session and lecturer_id is not None and session.lecturer_id != lecturer_id:
            raise AuthorizationError("This is not your session")
        if not session or not session.is_active:
            logger.info("close ignored: session %s is missing or already closed", session_id)
            return False

        try:
            closed = self._sessions.close(session_id)
        except StoreError:
            logger.exception("failed to close session %s", session_id)
            return False
        if not closed:
            logger.info("close ignored: session %s was closed concurrently", session_id)
            return False

        logger.info("session %s closed", session_id)
        self._feed.publish_session(replace(session, status=SessionStatus.CLOSED))
        return True

    def check_in(
        self,
        *,
        session_id: str,
        student_no: str,
        location: Optional[GeoPoint] = None,
        now: datetime | None = None,
    ) -> CheckInResult:
        student_no = require_non_empty(student_no, "Student number")

        session = self._sessions.get_by_id(session_id)
        if not session or not session.is_active:
            raise NoActiveSessionError("No active session")

        existing = self._scans.get_for_session_and_student(session_id, student_no)
        if existing:
            return CheckInResult(scan=existing, already_recorded=True)

        now = now or now_local()
        decision = self._factory.classify(minutes_between(session.starts_at, now))

        student = self._roster.get_by_student_no(student_no)
        surname_initials = student.surname_initials if student else student_no

        try:
            scan = self._scans.create(
                session_id=session_id,
                student_no=student_no,
                surname_initials=surname_initials,
                status=decision.status,
                minutes_late=decision.minutes_late,
                scanned_at=now,
                location=location or CAMPUS_FALLBACK,
            )
        except DuplicateKeyError:
            # Lost a race with a concurrent check-in for the same student.
            existing = self._scans.get_for_session_and_student(session_id, student_no)
            if existing is None:
                raise
            logger.info("duplicate check-in for %s in session %s resolved to existing scan", student_no, session_id)
            return CheckInResult(scan=existing, already_recorded=True)

        logger.info(
            "check-in %s session=%s status=%s minutes_late=%s",
            student_no,
            session_id,
            scan.status.value,
            scan.minutes_late,
        )
        self._feed.publish_scan(scan)
        return CheckInResult(scan=scan, already_recorded=False)

    def get_session_state(self, session_id: str) -> Optional[SessionWithScans]:
        return self._sessions.get_with_scans(session_id)

    def list_sessions(self, course_id: Optional[str] = None) -> Sequence[SessionWithScans]:
        return self._sessions.list_with_scans(course_id=course_id)

    def list_active_sessions(self, lecturer_id: str) -> Sequence[Session]:
        return self._sessions.list_active_for_lecturer(lecturer_id)

    def scans_after(self, session_id: str, after_id: int = 0) -> Sequence[Scan]:
        """Polling fallback for observers that cannot hold a feed subscription."""
        return self._scans.list_after(session_id, after_id)
