from __future__ import annotations

import math
from datetime import datetime, time


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now()


def truncate_to_minute(value: time) -> time:
    return value.replace(second=0, microsecond=0)


def minutes_between(start: datetime, end: datetime) -> float:
    """Signed number of minutes from ``start`` to ``end``."""
    return (end - start).total_seconds() / 60


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upwards (2.5 -> 3).

    Built-in ``round`` uses banker's rounding, which would report 12.5 minutes
    late as 12.
    """
    return int(math.floor(value + 0.5))
