from __future__ import annotations

from dataclasses import dataclass

from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DatabaseConnection, DBConfig
from .lecturers.mysql_admin_repository import MySQLAdminRepository
from .lecturers.mysql_lecturer_repository import MySQLLecturerRepository
from .lecturers.service import AuthService, LecturerService
from .reports.service import AttendanceRegisterService
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.service import RosterService
from .sessions.factory import ScanStrategyFactory
from .sessions.feed import ChangeFeed
from .sessions.mysql_session_repository import MySQLScanRepository, MySQLSessionRepository
from .sessions.service import SessionService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection | None
    feed: ChangeFeed

    auth_service: AuthService
    lecturer_service: LecturerService
    course_service: CourseService
    roster_service: RosterService
    session_service: SessionService
    register_service: AttendanceRegisterService

    def open(self) -> None:
        if self.conn is not None:
            self.conn.open()

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()


def build_services(
    *,
    conn: DatabaseConnection | None,
    feed: ChangeFeed,
    admin_repo,
    lecturers_repo,
    courses_repo: CourseRepository,
    roster_repo,
    sessions_repo,
    scans_repo,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, fakes in tests)."""

    return Container(
        conn=conn,
        feed=feed,
        auth_service=AuthService(admin_repo, lecturers_repo),
        lecturer_service=LecturerService(lecturers_repo),
        course_service=CourseService(courses_repo),
        roster_service=RosterService(roster_repo, courses_repo),
        session_service=SessionService(
            sessions_repo,
            scans_repo,
            courses_repo,
            roster_repo,
            feed,
            strategy_factory=ScanStrategyFactory(),
        ),
        register_service=AttendanceRegisterService(courses_repo, roster_repo, sessions_repo),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    return build_services(
        conn=conn,
        feed=ChangeFeed(),
        admin_repo=MySQLAdminRepository(conn),
        lecturers_repo=MySQLLecturerRepository(conn),
        courses_repo=MySQLCourseRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        scans_repo=MySQLScanRepository(conn),
    )
