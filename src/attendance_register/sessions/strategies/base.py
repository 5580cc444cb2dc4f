from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import ScanStatus


@dataclass(frozen=True)
class ScanDecision:
    status: ScanStatus
    minutes_late: int = 0


class ScanStrategy(ABC):
    """Strategy Pattern: encapsulate how a check-in is classified."""

    @abstractmethod
    def decide(self, *, elapsed_minutes: float) -> ScanDecision:
        raise NotImplementedError
