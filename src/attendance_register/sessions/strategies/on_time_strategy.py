from __future__ import annotations

from ...core.enums import ScanStatus
from .base import ScanDecision, ScanStrategy


class OnTimeStrategy(ScanStrategy):
    """Check-in within the grace window."""

    def decide(self, *, elapsed_minutes: float) -> ScanDecision:
        return ScanDecision(status=ScanStatus.PRESENT, minutes_late=0)
