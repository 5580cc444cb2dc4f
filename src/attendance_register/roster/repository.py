from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class RosterRepository(Protocol):
    def upsert_student(self, *, student_no: str, surname_initials: str) -> Student:
        """Insert a student or refresh the name of the existing one.

        Never creates a second row for the same ``student_no``.
        """

        raise NotImplementedError

    def enrol(self, *, student_id: str, course_id: str) -> bool:
        """Insert-or-no-op. Returns False when the enrolment already existed."""

        raise NotImplementedError

    def remove_enrolment(self, *, student_id: str, course_id: str) -> bool:
        raise NotImplementedError

    def get_by_student_no(self, student_no: str) -> Optional[Student]:
        raise NotImplementedError

    def list_for_course(self, course_id: str) -> Sequence[Student]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        """Every student with the ids of the courses they are enrolled in."""

        raise NotImplementedError
