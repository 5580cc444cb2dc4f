from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import LATE_GRACE_MINUTES
from .strategies.base import ScanDecision, ScanStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class ScanStrategyFactory:
    """Factory Pattern: choose the classification strategy from elapsed time."""

    grace_minutes: int = LATE_GRACE_MINUTES

    def for_elapsed(self, elapsed_minutes: float) -> ScanStrategy:
        if elapsed_minutes <= self.grace_minutes:
            return OnTimeStrategy()
        return LateStrategy()

    def classify(self, elapsed_minutes: float) -> ScanDecision:
        return self.for_elapsed(elapsed_minutes).decide(elapsed_minutes=elapsed_minutes)


def classify_elapsed(elapsed_minutes: float) -> ScanDecision:
    """Classify with the faculty's fixed grace window."""
    return ScanStrategyFactory().classify(elapsed_minutes)
