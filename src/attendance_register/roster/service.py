from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..courses.repository import CourseRepository
from .model import Student, StudentUpload, UploadSummary
from .repository import RosterRepository

logger = logging.getLogger(__name__)


class RosterService:
    """Use case: lecturers maintain course rosters."""

    def __init__(self, roster: RosterRepository, courses: CourseRepository):
        self._roster = roster
        self._courses = courses

    def _require_course(self, course_id: str) -> None:
        if not self._courses.get_by_id(course_id):
            raise NotFoundError("Course not found")

    def _add(self, course_id: str, student_no: str, surname_initials: str) -> tuple[Student, bool]:
        student = self._roster.upsert_student(student_no=student_no, surname_initials=surname_initials)
        return student, self._roster.enrol(student_id=student.student_id, course_id=course_id)

    def add_student(self, *, course_id: str, student_no: str, surname_initials: str) -> Student:
        student_no = require_non_empty(student_no, "Student number")
        surname_initials = require_non_empty(surname_initials, "Surname and initials")
        self._require_course(course_id)

        student, _ = self._add(course_id, student_no, surname_initials)
        return student

    def upload_students(self, *, course_id: str, rows: Iterable[StudentUpload]) -> UploadSummary:
        """Upsert and enrol every row. Store failures abort the upload."""

        self._require_course(course_id)

        added = already = invalid = 0
        for row in rows:
            student_no = (row.student_no or "").strip()
            surname_initials = (row.surname_initials or "").strip()
            if not student_no or not surname_initials:
                invalid += 1
                continue
            _, added_now = self._add(course_id, student_no, surname_initials)
            if added_now:
                added += 1
            else:
                already += 1

        summary = UploadSummary(added=added, already_enrolled=already, invalid=invalid)
        logger.info("roster upload for course %s: %s", course_id, summary)
        if not added and not already:
            raise ValidationError("No valid rows found. Check file format.")
        return summary

    def remove_from_course(self, *, student_id: str, course_id: str) -> None:
        if not self._roster.remove_enrolment(student_id=student_id, course_id=course_id):
            raise NotFoundError("Student is not enrolled in this course")

    def list_for_course(self, course_id: str) -> Sequence[Student]:
        return self._roster.list_for_course(course_id)

    def list_all(self) -> Sequence[Student]:
        return self._roster.list_all()

    def find_student(self, student_no: str) -> Optional[Student]:
        return self._roster.get_by_student_no(student_no)
