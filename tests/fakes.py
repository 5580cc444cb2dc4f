"""In-memory repositories standing in for the MySQL ones."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from attendance_register.core.enums import ScanStatus, SessionStatus
from attendance_register.core.exceptions import DuplicateKeyError
from attendance_register.courses.model import Course
from attendance_register.lecturers.model import AdminConfig, Lecturer
from attendance_register.roster.model import Student
from attendance_register.sessions.model import GeoPoint, Scan, Session, SessionWithScans


class InMemoryAdmin:
    def __init__(self, config: Optional[AdminConfig] = None):
        self.config = config

    def get(self) -> Optional[AdminConfig]:
        return self.config

    def save(self, *, username: str, password_hash: str) -> None:
        self.config = AdminConfig(username=username, password_hash=password_hash, initialized=True)

    def update_password(self, password_hash: str) -> bool:
        if not self.config:
            return False
        self.config = replace(self.config, password_hash=password_hash)
        return True


class InMemoryLecturers:
    def __init__(self):
        self._by_id: dict[str, Lecturer] = {}

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda lec: lec.name)

    def get_by_id(self, lecturer_id: str) -> Optional[Lecturer]:
        return self._by_id.get(lecturer_id)

    def get_by_email(self, email: str) -> Optional[Lecturer]:
        for lec in self._by_id.values():
            if lec.email.lower() == (email or "").lower():
                return lec
        return None

    def create(self, *, lecturer_id, name, email, department, password_hashes) -> Lecturer:
        lec = Lecturer(
            lecturer_id=lecturer_id,
            name=name,
            email=email,
            department=department,
            password_hashes=tuple(password_hashes),
        )
        self._by_id[lecturer_id] = lec
        return lec

    def replace_passwords(self, lecturer_id: str, password_hashes) -> bool:
        lec = self._by_id.get(lecturer_id)
        if not lec:
            return False
        self._by_id[lecturer_id] = replace(lec, password_hashes=tuple(password_hashes))
        return True

    def delete_by_id(self, lecturer_id: str) -> bool:
        return self._by_id.pop(lecturer_id, None) is not None


class InMemoryCourses:
    def __init__(self, *courses: Course):
        self._by_id: dict[str, Course] = {c.course_id: c for c in courses}

    def list_all(self):
        return list(self._by_id.values())

    def list_for_lecturer(self, lecturer_id: str):
        return [c for c in self._by_id.values() if c.lecturer_id == lecturer_id]

    def get_by_id(self, course_id: str) -> Optional[Course]:
        return self._by_id.get(course_id)

    def create(self, course: Course) -> Course:
        self._by_id[course.course_id] = course
        return course

    def delete_by_id(self, course_id: str) -> bool:
        return self._by_id.pop(course_id, None) is not None


class InMemoryRoster:
    def __init__(self):
        self._by_no: dict[str, Student] = {}
        self._enrolments: set[tuple[str, str]] = set()

    def upsert_student(self, *, student_no: str, surname_initials: str) -> Student:
        student = Student(student_id=f"S_{student_no}", student_no=student_no, surname_initials=surname_initials)
        self._by_no[student_no] = student
        return student

    def enrol(self, *, student_id: str, course_id: str) -> bool:
        key = (student_id, course_id)
        if key in self._enrolments:
            return False
        self._enrolments.add(key)
        return True

    def remove_enrolment(self, *, student_id: str, course_id: str) -> bool:
        key = (student_id, course_id)
        if key not in self._enrolments:
            return False
        self._enrolments.remove(key)
        return True

    def get_by_student_no(self, student_no: str) -> Optional[Student]:
        return self._by_no.get(student_no)

    def _with_courses(self, student: Student) -> Student:
        course_ids = tuple(sorted(c for s, c in self._enrolments if s == student.student_id))
        return replace(student, course_ids=course_ids)

    def list_for_course(self, course_id: str):
        items = [s for s in self._by_no.values() if (s.student_id, course_id) in self._enrolments]
        items.sort(key=lambda s: s.student_no)
        return [self._with_courses(s) for s in items]

    def list_all(self):
        return [self._with_courses(s) for s in sorted(self._by_no.values(), key=lambda s: s.student_no)]


class InMemoryScans:
    def __init__(self):
        self._rows: list[Scan] = []
        self._id = 0

    def get_for_session_and_student(self, session_id: str, student_no: str) -> Optional[Scan]:
        for scan in self._rows:
            if scan.session_id == session_id and scan.student_no == student_no:
                return scan
        return None

    def create(
        self,
        *,
        session_id: str,
        student_no: str,
        surname_initials: str,
        status: ScanStatus,
        minutes_late: int,
        scanned_at: datetime,
        location: Optional[GeoPoint] = None,
    ) -> Scan:
        if any(s.session_id == session_id and s.student_no == student_no for s in self._rows):
            raise DuplicateKeyError(f"Duplicate entry '{session_id}-{student_no}'")
        self._id += 1
        scan = Scan(
            scan_id=self._id,
            session_id=session_id,
            student_no=student_no,
            surname_initials=surname_initials,
            status=status,
            minutes_late=minutes_late,
            scanned_at=scanned_at,
            location=location,
        )
        self._rows.append(scan)
        return scan

    def for_session(self, session_id: str) -> tuple[Scan, ...]:
        items = [s for s in self._rows if s.session_id == session_id]
        items.sort(key=lambda s: (s.scanned_at, s.scan_id), reverse=True)
        return tuple(items)

    def list_after(self, session_id: str, after_id: int):
        return [s for s in self._rows if s.session_id == session_id and s.scan_id > after_id]


class InMemorySessions:
    def __init__(self, scans: InMemoryScans):
        self._scans = scans
        self._by_id: dict[str, Session] = {}

    def create(self, session: Session) -> Session:
        self._by_id[session.session_id] = session
        return session

    def get_by_id(self, session_id: str) -> Optional[Session]:
        return self._by_id.get(session_id)

    def close(self, session_id: str) -> bool:
        session = self._by_id.get(session_id)
        if not session or not session.is_active:
            return False
        self._by_id[session_id] = replace(session, status=SessionStatus.CLOSED)
        return True

    def get_with_scans(self, session_id: str) -> Optional[SessionWithScans]:
        session = self._by_id.get(session_id)
        if not session:
            return None
        return SessionWithScans(session=session, scans=self._scans.for_session(session_id))

    def list_with_scans(self, *, course_id: Optional[str] = None):
        items = [s for s in self._by_id.values() if course_id is None or s.course_id == course_id]
        items.sort(key=lambda s: s.starts_at, reverse=True)
        return [SessionWithScans(session=s, scans=self._scans.for_session(s.session_id)) for s in items]

    def list_active_for_lecturer(self, lecturer_id: str):
        return [s for s in self._by_id.values() if s.lecturer_id == lecturer_id and s.is_active]
