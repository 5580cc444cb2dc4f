from __future__ import annotations

import logging
from typing import Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.ids import gen_id, gen_passwords
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import ADMIN_PASSWORD_MIN_LENGTH
from ..core.exceptions import AuthenticationError, DuplicateKeyError, NotFoundError, ValidationError
from .model import AdminConfig, Lecturer, LecturerCredentials
from .repository import AdminRepository, LecturerRepository

logger = logging.getLogger(__name__)


def _matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class LecturerService:
    """Use case: the admin manages lecturer accounts."""

    def __init__(self, lecturers: LecturerRepository):
        self._lecturers = lecturers

    def list_lecturers(self) -> Sequence[Lecturer]:
        return self._lecturers.list_all()

    def create_lecturer(self, *, name: str, email: str, department: str) -> LecturerCredentials:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        department = require_non_empty(department, "Department")

        if self._lecturers.get_by_email(email):
            raise ValidationError("Email already registered")

        passwords = gen_passwords()
        try:
            lecturer = self._lecturers.create(
                lecturer_id=gen_id(),
                name=name,
                email=email,
                department=department,
                password_hashes=[generate_password_hash(p) for p in passwords],
            )
        except DuplicateKeyError:
            raise ValidationError("Email already registered")
        logger.info("lecturer %s created", lecturer.lecturer_id)
        return LecturerCredentials(lecturer=lecturer, passwords=passwords)

    def regenerate_passwords(self, lecturer_id: str) -> LecturerCredentials:
        """Replace all 5 passwords; the old ones stop working immediately."""

        lecturer = self._lecturers.get_by_id(lecturer_id)
        if not lecturer:
            raise NotFoundError("Lecturer not found")

        passwords = gen_passwords()
        hashes = [generate_password_hash(p) for p in passwords]
        if not self._lecturers.replace_passwords(lecturer_id, hashes):
            raise NotFoundError("Lecturer not found")

        logger.info("passwords regenerated for lecturer %s", lecturer_id)
        return LecturerCredentials(
            lecturer=Lecturer(
                lecturer_id=lecturer.lecturer_id,
                name=lecturer.name,
                email=lecturer.email,
                department=lecturer.department,
                password_hashes=tuple(hashes),
            ),
            passwords=passwords,
        )

    def delete_lecturer(self, lecturer_id: str) -> None:
        if not self._lecturers.delete_by_id(lecturer_id):
            raise NotFoundError("Lecturer not found")
        logger.info("lecturer %s deleted", lecturer_id)


class AuthService:
    """Use case: admin and lecturer login, admin password management."""

    def __init__(self, admin: AdminRepository, lecturers: LecturerRepository):
        self._admin = admin
        self._lecturers = lecturers

    def is_initialized(self) -> bool:
        config = self._admin.get()
        return bool(config and config.initialized)

    def setup_admin(self, *, username: str, password: str, confirm: str) -> None:
        """First-run setup. Refused once an admin exists."""

        if self.is_initialized():
            raise ValidationError("Admin account already set up")

        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", ADMIN_PASSWORD_MIN_LENGTH)
        if password != confirm:
            raise ValidationError("Passwords do not match")

        self._admin.save(username=username, password_hash=generate_password_hash(password))

    def authenticate_admin(self, username: str, password: str) -> AdminConfig:
        config = self._admin.get()
        if not config or not config.initialized:
            raise AuthenticationError("Incorrect username or password")
        if config.username != (username or "").strip() or not _matches(config.password_hash, password or ""):
            raise AuthenticationError("Incorrect username or password")
        return config

    def authenticate_lecturer(self, email: str, password: str) -> Lecturer:
        lecturer = self._lecturers.get_by_email((email or "").strip().lower())
        if not lecturer or not any(_matches(h, password or "") for h in lecturer.password_hashes):
            raise AuthenticationError("Incorrect email or password. Contact admin if all passwords are lost.")
        return lecturer

    def change_admin_password(self, *, current: str, new: str, confirm: str) -> None:
        config = self._admin.get()
        if not config or not _matches(config.password_hash, current or ""):
            raise ValidationError("Current password incorrect")
        require_min_length(new, "New password", ADMIN_PASSWORD_MIN_LENGTH)
        if new != confirm:
            raise ValidationError("Passwords do not match")

        if not self._admin.update_password(generate_password_hash(new)):
            raise ValidationError("Failed to update password")
