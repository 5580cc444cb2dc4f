from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_PLANNED_CLASSES, DEFAULT_SEMESTER


@dataclass(frozen=True)
class Course:
    """Domain entity: a course owned by exactly one lecturer."""

    course_id: str
    lecturer_id: str
    code: str
    name: str
    department: str
    year: int
    semester: str = DEFAULT_SEMESTER
    total_planned_classes: int = DEFAULT_PLANNED_CLASSES
    room: str = ""
