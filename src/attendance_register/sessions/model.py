from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import ScanStatus, SessionStatus


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Session:
    """Domain entity: one class occurrence accepting check-ins while ACTIVE."""

    session_id: str
    course_id: str
    lecturer_id: str
    date: date
    start_time: time
    room: str
    status: SessionStatus
    location: Optional[GeoPoint] = None

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE


@dataclass(frozen=True)
class Scan:
    """Domain entity: a student's check-in. Immutable once recorded.

    ``surname_initials`` is a snapshot taken at scan time; later roster edits
    do not rewrite history.
    """

    scan_id: int
    session_id: str
    student_no: str
    surname_initials: str
    status: ScanStatus
    minutes_late: int
    scanned_at: datetime
    location: Optional[GeoPoint] = None


@dataclass(frozen=True)
class SessionWithScans:
    """Read-model: a session plus its scans, most recent first."""

    session: Session
    scans: tuple[Scan, ...] = field(default=())

    def scan_for(self, student_no: str) -> Optional[Scan]:
        for scan in self.scans:
            if scan.student_no == student_no:
                return scan
        return None


@dataclass(frozen=True)
class CheckInResult:
    scan: Scan
    already_recorded: bool = False
