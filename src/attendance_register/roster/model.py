from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Student:
    """Domain entity: Student, keyed naturally by ``student_no``."""

    student_id: str
    student_no: str
    surname_initials: str
    course_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class StudentUpload:
    """One row of the flat roster upload: student number + display name."""

    student_no: str
    surname_initials: str


@dataclass(frozen=True)
class UploadSummary:
    added: int = 0
    already_enrolled: int = 0
    invalid: int = 0
