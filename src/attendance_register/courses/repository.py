from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course


class CourseRepository(Protocol):
    def list_all(self) -> Sequence[Course]:
        raise NotImplementedError

    def list_for_lecturer(self, lecturer_id: str) -> Sequence[Course]:
        raise NotImplementedError

    def get_by_id(self, course_id: str) -> Optional[Course]:
        raise NotImplementedError

    def create(self, course: Course) -> Course:
        raise NotImplementedError

    def delete_by_id(self, course_id: str) -> bool:
        """Delete a course; sessions, scans and enrolments go with it (FK cascade)."""

        raise NotImplementedError
