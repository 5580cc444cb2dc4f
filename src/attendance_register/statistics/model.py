from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Standing


@dataclass(frozen=True)
class AttendanceStats:
    present: int
    late: int
    absent: int
    total: int

    @property
    def attended(self) -> int:
        return self.present + self.late


@dataclass(frozen=True)
class StudentStanding:
    """Read-model for the lecturer's report view."""

    student_no: str
    surname_initials: str
    stats: AttendanceStats
    pct: int
    standing: Standing
    at_risk: bool
