from __future__ import annotations

from ...common.datetime_utils import round_half_up
from ...core.enums import ScanStatus
from .base import ScanDecision, ScanStrategy


class LateStrategy(ScanStrategy):
    """Late check-in; minutes are counted from the session start, not from the end of grace."""

    def decide(self, *, elapsed_minutes: float) -> ScanDecision:
        return ScanDecision(status=ScanStatus.LATE, minutes_late=max(0, round_half_up(elapsed_minutes)))
