from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.ids import gen_id
from ..common.validators import require_non_empty, require_positive_int
from ..core.constants import DEFAULT_PLANNED_CLASSES, DEFAULT_SEMESTER
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import Course
from .repository import CourseRepository

logger = logging.getLogger(__name__)


class CourseService:
    def __init__(self, courses: CourseRepository):
        self._courses = courses

    def create_course(
        self,
        *,
        lecturer_id: str,
        code: str,
        name: str,
        department: str = "",
        year,
        semester: Optional[str] = None,
        total_planned_classes=DEFAULT_PLANNED_CLASSES,
        room: Optional[str] = None,
    ) -> Course:
        course = Course(
            course_id=gen_id(),
            lecturer_id=lecturer_id,
            code=require_non_empty(code, "Course code").upper(),
            name=require_non_empty(name, "Course name"),
            department=(department or "").strip(),
            year=require_positive_int(year, "Year"),
            semester=(semester or "").strip() or DEFAULT_SEMESTER,
            total_planned_classes=require_positive_int(total_planned_classes, "Planned classes"),
            room=(room or "").strip(),
        )
        self._courses.create(course)
        logger.info("course %s (%s) created by lecturer %s", course.course_id, course.code, lecturer_id)
        return course

    def list_for_lecturer(self, lecturer_id: str) -> Sequence[Course]:
        return self._courses.list_for_lecturer(lecturer_id)

    def list_all(self) -> Sequence[Course]:
        return self._courses.list_all()

    def get_course(self, course_id: str) -> Course:
        course = self._courses.get_by_id(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    def get_owned_course(self, *, lecturer_id: str, course_id: str) -> Course:
        course = self.get_course(course_id)
        if course.lecturer_id != lecturer_id:
            raise AuthorizationError("You do not teach this course")
        return course

    def delete_course(self, *, lecturer_id: str, course_id: str) -> None:
        self.get_owned_course(lecturer_id=lecturer_id, course_id=course_id)
        if not self._courses.delete_by_id(course_id):
            raise NotFoundError("Course not found")
        logger.info("course %s deleted", course_id)
