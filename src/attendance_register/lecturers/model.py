from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Lecturer:
    """Domain entity: Lecturer.

    Note: Plain data object (no DB access code). ``password_hashes`` holds the
    werkzeug hashes of the lecturer's 5 active passwords; any one logs in.
    """

    lecturer_id: str
    name: str
    email: str
    department: str
    password_hashes: tuple[str, ...] = field(default=(), repr=False)


@dataclass(frozen=True)
class LecturerCredentials:
    """Plain-text passwords, handed to the admin once after creation/regeneration."""

    lecturer: Lecturer
    passwords: list[str] = field(repr=False)


@dataclass(frozen=True)
class AdminConfig:
    username: str
    password_hash: str = field(repr=False)
    initialized: bool = True
