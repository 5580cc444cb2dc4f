from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from attendance_register.core.enums import ScanStatus, SessionStatus
from attendance_register.core.exceptions import (
    AuthorizationError,
    DuplicateKeyError,
    NoActiveSessionError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from attendance_register.sessions.feed import ChangeFeed
from attendance_register.sessions.geolocation import CAMPUS_FALLBACK
from attendance_register.sessions.model import GeoPoint
from attendance_register.sessions.service import SessionService

from fakes import InMemoryCourses, InMemoryRoster, InMemoryScans, InMemorySessions


class RacingScans(InMemoryScans):
    """The first lookup misses, as if a concurrent check-in landed right after it."""

    def __init__(self):
        super().__init__()
        self._missed = False

    def get_for_session_and_student(self, session_id, student_no):
        if not self._missed:
            self._missed = True
            return None
        return super().get_for_session_and_student(session_id, student_no)


class FailingCloseSessions(InMemorySessions):
    def close(self, session_id):
        raise StoreUnavailableError("connection lost")


class ReadFailsAfterCloseSessions(InMemorySessions):
    def __init__(self, scans):
        super().__init__(scans)
        self.closed_ids: set[str] = set()

    def close(self, session_id):
        closed = super().close(session_id)
        if closed:
            self.closed_ids.add(session_id)
        return closed

    def get_by_id(self, session_id):
        if session_id in self.closed_ids:
            raise StoreUnavailableError("connection lost")
        return super().get_by_id(session_id)


class UnreadableSessions(InMemorySessions):
    def get_by_id(self, session_id):
        raise StoreUnavailableError("connection lost")


class UnavailableScans(InMemoryScans):
    def create(self, **kwargs):
        raise StoreUnavailableError("connection lost")


def _service(course, *, scans=None, sessions=None, roster=None, feed=None):
    scans = scans or InMemoryScans()
    sessions = sessions or InMemorySessions(scans)
    roster = roster or InMemoryRoster()
    return SessionService(sessions, scans, InMemoryCourses(course), roster, feed or ChangeFeed())


def test_open_session_defaults(course, fixed_now):
    svc = _service(course)

    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now.replace(second=42))

    assert session.status == SessionStatus.ACTIVE
    assert session.date == fixed_now.date()
    assert session.start_time == fixed_now.time()
    assert session.room == "Lab 2"
    assert session.location == CAMPUS_FALLBACK


def test_open_session_explicit_room_and_location(course, fixed_now):
    svc = _service(course)
    here = GeoPoint(latitude=-23.88, longitude=29.74)

    session = svc.open_session(course_id="C1", lecturer_id="L1", room="Hall A", location=here, now=fixed_now)

    assert session.room == "Hall A"
    assert session.location == here


def test_open_session_room_falls_back_to_tba(course, fixed_now):
    svc = _service(replace(course, room=""))

    session = svc.open_session(course_id="C1", lecturer_id="L1", room="  ", now=fixed_now)

    assert session.room == "TBA"


def test_open_session_requires_owned_course(course, fixed_now):
    svc = _service(course)

    with pytest.raises(NotFoundError):
        svc.open_session(course_id="nope", lecturer_id="L1", now=fixed_now)
    with pytest.raises(AuthorizationError):
        svc.open_session(course_id="C1", lecturer_id="L2", now=fixed_now)


def test_several_active_sessions_per_lecturer(course, fixed_now):
    svc = _service(course)

    svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)
    svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now + timedelta(hours=1))

    assert len(svc.list_active_sessions("L1")) == 2


def test_check_in_classification_scenario(course, fixed_now):
    roster = InMemoryRoster()
    roster.upsert_student(student_no="2021001", surname_initials="Mokoena T")
    svc = _service(course, roster=roster)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    a = svc.check_in(session_id=session.session_id, student_no="2021001", now=fixed_now + timedelta(minutes=5))
    b = svc.check_in(session_id=session.session_id, student_no="2021002", now=fixed_now + timedelta(minutes=14))
    c = svc.check_in(session_id=session.session_id, student_no="2021003", now=fixed_now + timedelta(minutes=20))

    assert (a.scan.status, a.scan.minutes_late) == (ScanStatus.PRESENT, 0)
    assert (b.scan.status, b.scan.minutes_late) == (ScanStatus.LATE, 14)
    assert (c.scan.status, c.scan.minutes_late) == (ScanStatus.LATE, 20)
    assert a.scan.surname_initials == "Mokoena T"
    assert b.scan.surname_initials == "2021002"
    assert not a.already_recorded


def test_check_in_at_grace_boundary_is_present(course, fixed_now):
    svc = _service(course)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    result = svc.check_in(session_id=session.session_id, student_no="1", now=fixed_now + timedelta(minutes=10))

    assert result.scan.status == ScanStatus.PRESENT


def test_check_in_measures_from_truncated_start(course, fixed_now):
    svc = _service(course)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now + timedelta(seconds=50))

    result = svc.check_in(
        session_id=session.session_id,
        student_no="1",
        now=fixed_now + timedelta(minutes=10, seconds=30),
    )

    assert result.scan.status == ScanStatus.LATE
    assert result.scan.minutes_late == 11


def test_check_in_is_idempotent(course, fixed_now):
    svc = _service(course)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    first = svc.check_in(session_id=session.session_id, student_no="2021001", now=fixed_now + timedelta(minutes=2))
    second = svc.check_in(session_id=session.session_id, student_no="2021001", now=fixed_now + timedelta(minutes=30))

    assert second.already_recorded
    assert second.scan == first.scan
    assert len(svc.get_session_state(session.session_id).scans) == 1


def test_check_in_duplicate_key_race_returns_existing(course, fixed_now):
    scans = RacingScans()
    svc = _service(course, scans=scans)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)
    winner = InMemoryScans.create(
        scans,
        session_id=session.session_id,
        student_no="2021001",
        surname_initials="2021001",
        status=ScanStatus.PRESENT,
        minutes_late=0,
        scanned_at=fixed_now,
    )

    result = svc.check_in(session_id=session.session_id, student_no="2021001", now=fixed_now)

    assert result.already_recorded
    assert result.scan == winner


def test_duplicate_key_without_existing_row_propagates(course, fixed_now):
    class AlwaysDuplicate(InMemoryScans):
        def create(self, **kwargs):
            raise DuplicateKeyError("Duplicate entry")

    svc = _service(course, scans=AlwaysDuplicate())
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    with pytest.raises(DuplicateKeyError):
        svc.check_in(session_id=session.session_id, student_no="1", now=fixed_now)


def test_check_in_store_unavailable_propagates(course, fixed_now):
    svc = _service(course, scans=UnavailableScans())
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    with pytest.raises(StoreUnavailableError):
        svc.check_in(session_id=session.session_id, student_no="1", now=fixed_now)


def test_check_in_requires_student_no_before_store_access(course, fixed_now):
    svc = _service(course)

    with pytest.raises(ValidationError):
        svc.check_in(session_id="missing", student_no="  ", now=fixed_now)


def test_check_in_closed_or_missing_session(course, fixed_now):
    svc = _service(course)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)
    svc.close_session(session.session_id)

    with pytest.raises(NoActiveSessionError):
        svc.check_in(session_id=session.session_id, student_no="1", now=fixed_now)
    with pytest.raises(NoActiveSessionError):
        svc.check_in(session_id="missing", student_no="1", now=fixed_now)


def test_close_is_terminal_and_keeps_scans(course, fixed_now):
    svc = _service(course)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)
    svc.check_in(session_id=session.session_id, student_no="1", now=fixed_now)

    assert svc.close_session(session.session_id) is True
    assert svc.close_session(session.session_id) is False
    assert svc.close_session("missing") is False

    state = svc.get_session_state(session.session_id)
    assert state.session.status == SessionStatus.CLOSED
    assert len(state.scans) == 1
    assert svc.list_active_sessions("L1") == []


def test_close_store_failure_reports_false(course, fixed_now):
    scans = InMemoryScans()
    svc = _service(course, scans=scans, sessions=FailingCloseSessions(scans))
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    assert svc.close_session(session.session_id) is False


def test_session_state_lists_scans_most_recent_first(course, fixed_now):
    svc = _service(course)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)
    for i, no in enumerate(["A1", "B2", "C3"]):
        svc.check_in(session_id=session.session_id, student_no=no, now=fixed_now + timedelta(minutes=i))

    state = svc.get_session_state(session.session_id)

    assert [s.student_no for s in state.scans] == ["C3", "B2", "A1"]
    assert svc.get_session_state("missing") is None


def test_list_sessions_by_date_descending(course, fixed_now):
    svc = _service(course)
    older = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now - timedelta(days=7))
    newer = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    ids = [s.session.session_id for s in svc.list_sessions("C1")]

    assert ids == [newer.session_id, older.session_id]


def test_scans_after_returns_insertion_order(course, fixed_now):
    svc = _service(course)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)
    first = svc.check_in(session_id=session.session_id, student_no="A1", now=fixed_now)
    svc.check_in(session_id=session.session_id, student_no="B2", now=fixed_now)
    svc.check_in(session_id=session.session_id, student_no="C3", now=fixed_now)

    after = svc.scans_after(session.session_id, first.scan.scan_id)

    assert [s.student_no for s in after] == ["B2", "C3"]


def test_check_in_and_close_publish_on_feed(course, fixed_now):
    feed = ChangeFeed()
    svc = _service(course, feed=feed)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)
    events = []

    with feed.subscribe(
        session.session_id,
        on_scan=lambda scan: events.append(("scan", scan.student_no)),
        on_session=lambda s: events.append(("session", s.status)),
    ):
        svc.check_in(session_id=session.session_id, student_no="A1", now=fixed_now)
        svc.check_in(session_id=session.session_id, student_no="A1", now=fixed_now)
        svc.close_session(session.session_id)

    assert events == [("scan", "A1"), ("session", SessionStatus.CLOSED)]


def test_close_publishes_even_if_later_reads_fail(course, fixed_now):
    feed = ChangeFeed()
    scans = InMemoryScans()
    sessions = ReadFailsAfterCloseSessions(scans)
    svc = _service(course, scans=scans, sessions=sessions, feed=feed)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)
    events = []
    feed.subscribe(session.session_id, on_session=lambda s: events.append(s.status))

    assert svc.close_session(session.session_id) is True

    assert events == [SessionStatus.CLOSED]
    assert sessions.get_with_scans(session.session_id).session.status == SessionStatus.CLOSED


def test_close_read_failure_reports_false(course, fixed_now):
    scans = InMemoryScans()
    sessions = UnreadableSessions(scans)
    svc = _service(course, scans=scans, sessions=sessions)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    assert svc.close_session(session.session_id, lecturer_id="L1") is False
    assert sessions.get_with_scans(session.session_id).session.is_active


def test_close_by_other_lecturer_is_forbidden(course, fixed_now):
    svc = _service(course)
    session = svc.open_session(course_id="C1", lecturer_id="L1", now=fixed_now)

    with pytest.raises(AuthorizationError):
        svc.close_session(session.session_id, lecturer_id="L2")

    assert svc.get_session_state(session.session_id).session.is_active
    assert svc.close_session(session.session_id, lecturer_id="L1") is True
