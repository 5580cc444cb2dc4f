from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles stored in the Flask session after login."""

    ADMIN = "admin"
    LECTURER = "lecturer"


class SessionStatus(str, Enum):
    """Lifecycle of an attendance session. CLOSED is terminal."""

    ACTIVE = "active"
    CLOSED = "closed"


class ScanStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"


class Standing(str, Enum):
    """Attendance policy bands."""

    GOOD_STANDING = "Good Standing"
    AT_RISK = "At Risk"
    CRITICAL = "Critical"
