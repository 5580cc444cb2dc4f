from __future__ import annotations

from datetime import datetime

import pytest

from attendance_register.container import build_services
from attendance_register.courses.model import Course
from attendance_register.sessions.feed import ChangeFeed

from fakes import (
    InMemoryAdmin,
    InMemoryCourses,
    InMemoryLecturers,
    InMemoryRoster,
    InMemoryScans,
    InMemorySessions,
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 3, 9, 0, 0)


@pytest.fixture
def course() -> Course:
    return Course(
        course_id="C1",
        lecturer_id="L1",
        code="COMP301",
        name="Software Engineering",
        department="Computer Science",
        year=3,
        room="Lab 2",
    )


@pytest.fixture
def container(course):
    scans = InMemoryScans()
    return build_services(
        conn=None,
        feed=ChangeFeed(),
        admin_repo=InMemoryAdmin(),
        lecturers_repo=InMemoryLecturers(),
        courses_repo=InMemoryCourses(course),
        roster_repo=InMemoryRoster(),
        sessions_repo=InMemorySessions(scans),
        scans_repo=scans,
    )
