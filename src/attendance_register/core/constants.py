"""Policy constants.

Note: These are faculty policy, not deployment settings. Keep them here to
avoid magic numbers spread across code.
"""

LATE_GRACE_MINUTES = 10

GOOD_STANDING_MIN_PCT = 80
AT_RISK_MIN_PCT = 60

# Polokwane campus, used when the device cannot report a position.
CAMPUS_LATITUDE = -23.9045
CAMPUS_LONGITUDE = 29.4688

PASSWORDS_PER_LECTURER = 5
PASSWORD_LENGTH = 8
ADMIN_PASSWORD_MIN_LENGTH = 8

DEFAULT_PLANNED_CLASSES = 40
DEFAULT_SEMESTER = "1"
DEFAULT_ROOM = "TBA"

FACULTY_NAME = "Faculty of Management Sciences"
INSTITUTION_NAME = "Polokwane"
