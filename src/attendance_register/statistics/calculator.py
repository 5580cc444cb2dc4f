"""Attendance statistics as a pure fold over already-loaded sessions.

Nothing here touches the store or keeps state between calls, so adding or
removing a session is reflected on the next computation.
"""

from __future__ import annotations

from typing import Iterable

from ..common.datetime_utils import round_half_up
from ..core.constants import AT_RISK_MIN_PCT, GOOD_STANDING_MIN_PCT
from ..core.enums import ScanStatus, Standing
from ..sessions.model import SessionWithScans
from .model import AttendanceStats


def student_course_stats(student_no: str, course_id: str, sessions: Iterable[SessionWithScans]) -> AttendanceStats:
    present = late = absent = 0
    for item in sessions:
        if item.session.course_id != course_id:
            continue
        scan = item.scan_for(student_no)
        if scan is None:
            absent += 1
        elif scan.status == ScanStatus.LATE:
            late += 1
        else:
            present += 1
    return AttendanceStats(present=present, late=late, absent=absent, total=present + late + absent)


def attendance_pct(present: int, late: int, total: int) -> int:
    """Late arrivals count fully; 0 when no session has been held."""
    if total <= 0:
        return 0
    return round_half_up(100 * (present + late) / max(total, 1))


def stats_pct(stats: AttendanceStats) -> int:
    return attendance_pct(stats.present, stats.late, stats.total)


def classify_standing(pct: int) -> Standing:
    if pct >= GOOD_STANDING_MIN_PCT:
        return Standing.GOOD_STANDING
    if pct >= AT_RISK_MIN_PCT:
        return Standing.AT_RISK
    return Standing.CRITICAL


def is_at_risk(pct: int) -> bool:
    """Flag for intervention under the 80% attendance policy."""
    return pct < GOOD_STANDING_MIN_PCT
