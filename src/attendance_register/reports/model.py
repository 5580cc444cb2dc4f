from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RegisterReport:
    """Tabular attendance register: ``rows`` align with ``columns``."""

    title_lines: list[str]
    columns: list[str]
    rows: list[list] = field(default_factory=list)
    summary: list[tuple[str, object]] = field(default_factory=list)
    filename: str = "attendance.csv"
