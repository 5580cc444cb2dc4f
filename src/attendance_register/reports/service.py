from __future__ import annotations

import csv
import io
import re
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, round_half_up
from ..core.constants import FACULTY_NAME, GOOD_STANDING_MIN_PCT, INSTITUTION_NAME
from ..core.enums import ScanStatus
from ..core.exceptions import NotFoundError
from ..courses.model import Course
from ..courses.repository import CourseRepository
from ..roster.model import Student
from ..roster.repository import RosterRepository
from ..sessions.model import SessionWithScans
from ..sessions.repository import SessionRepository
from ..statistics.calculator import classify_standing, is_at_risk, stats_pct, student_course_stats
from ..statistics.model import StudentStanding
from .model import RegisterReport

STAT_COLUMNS = [
    "Present",
    "Late",
    "Absent",
    "Total Sessions",
    "Attendance %",
    "Status",
    f"AT RISK ({GOOD_STANDING_MIN_PCT}% Policy)",
]


def _session_label(item: SessionWithScans) -> str:
    s = item.session
    return f"{s.date.strftime('%Y-%m-%d')} {s.start_time.strftime('%H:%M')}"


def _cell(item: SessionWithScans, student_no: str) -> str:
    scan = item.scan_for(student_no)
    if scan is None:
        return "ABS"
    if scan.status == ScanStatus.LATE:
        return f"LATE (+{scan.minutes_late}min)"
    return "P"


class AttendanceRegisterService:
    """Builds the per-course attendance register from the statistics fold."""

    def __init__(self, courses: CourseRepository, roster: RosterRepository, sessions: SessionRepository):
        self._courses = courses
        self._roster = roster
        self._sessions = sessions

    def _load(self, course_id: str) -> tuple[Course, list[Student], list[SessionWithScans]]:
        course = self._courses.get_by_id(course_id)
        if not course:
            raise NotFoundError("Course not found")
        students = list(self._roster.list_for_course(course_id))
        sessions = [s for s in self._sessions.list_with_scans(course_id=course_id) if s.session.course_id == course_id]
        sessions.sort(key=lambda s: s.session.starts_at)
        return course, students, sessions

    @staticmethod
    def _standing(student: Student, course_id: str, sessions: Sequence[SessionWithScans]) -> StudentStanding:
        stats = student_course_stats(student.student_no, course_id, sessions)
        pct = stats_pct(stats)
        return StudentStanding(
            student_no=student.student_no,
            surname_initials=student.surname_initials,
            stats=stats,
            pct=pct,
            standing=classify_standing(pct),
            at_risk=is_at_risk(pct),
        )

    def course_standings(self, course_id: str) -> list[StudentStanding]:
        _, students, sessions = self._load(course_id)
        return [self._standing(st, course_id, sessions) for st in students]

    def build_register(
        self,
        course_id: str,
        *,
        lecturer_name: Optional[str] = None,
        now: datetime | None = None,
    ) -> RegisterReport:
        now = now or now_local()
        course, students, sessions = self._load(course_id)

        title_lines = [
            "ATTENDANCE REGISTER",
            f"{FACULTY_NAME} - {INSTITUTION_NAME}",
            f"Course: {course.name} ({course.code})",
            f"Department: {course.department}",
            f"Lecturer: {lecturer_name or '-'}",
            f"Year: {course.year} | Semester: {course.semester}",
            f"Total Planned Classes: {course.total_planned_classes}",
            f"Policy: Students must maintain at least {GOOD_STANDING_MIN_PCT}% attendance",
            f"Generated: {now.strftime('%Y-%m-%d %H:%M')}",
        ]
        columns = ["Student No", "Surname & Initials", *[_session_label(s) for s in sessions], *STAT_COLUMNS]

        rows: list[list] = []
        standings: list[StudentStanding] = []
        for student in students:
            st = self._standing(student, course_id, sessions)
            standings.append(st)
            rows.append(
                [
                    student.student_no,
                    student.surname_initials,
                    *[_cell(s, student.student_no) for s in sessions],
                    st.stats.present,
                    st.stats.late,
                    st.stats.absent,
                    st.stats.total,
                    f"{st.pct}%",
                    st.standing.value,
                    "YES - INTERVENTION NEEDED" if st.at_risk else "No",
                ]
            )

        class_average = (
            f"{round_half_up(sum(s.pct for s in standings) / len(standings))}%" if standings else "N/A"
        )
        summary = [
            ("Total Students", len(students)),
            (f"Students At Risk (<{GOOD_STANDING_MIN_PCT}%)", sum(1 for s in standings if s.at_risk)),
            ("Sessions Conducted", len(sessions)),
            ("Class Average", class_average),
        ]

        safe_name = re.sub(r"\s+", "_", course.name.strip())
        return RegisterReport(
            title_lines=title_lines,
            columns=columns,
            rows=rows,
            summary=summary,
            filename=f"Attendance_{course.code}_{safe_name}.csv",
        )


def to_csv(report: RegisterReport) -> str:
    out = io.StringIO()
    writer = csv.writer(out)
    for line in report.title_lines:
        writer.writerow([line])
    writer.writerow([])
    writer.writerow(report.columns)
    writer.writerows(report.rows)
    writer.writerow([])
    writer.writerow(["SUMMARY"])
    for label, value in report.summary:
        writer.writerow([label, value])
    return out.getvalue()
