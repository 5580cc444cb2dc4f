from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AdminConfig, Lecturer


class LecturerRepository(Protocol):
    """Repository interface for Lecturer.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def list_all(self) -> Sequence[Lecturer]:
        raise NotImplementedError

    def get_by_id(self, lecturer_id: str) -> Optional[Lecturer]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Lecturer]:
        """Case-insensitive lookup."""

        raise NotImplementedError

    def create(
        self,
        *,
        lecturer_id: str,
        name: str,
        email: str,
        department: str,
        password_hashes: Sequence[str],
    ) -> Lecturer:
        raise NotImplementedError

    def replace_passwords(self, lecturer_id: str, password_hashes: Sequence[str]) -> bool:
        """Swap all password hashes in a single transaction."""

        raise NotImplementedError

    def delete_by_id(self, lecturer_id: str) -> bool:
        raise NotImplementedError


class AdminRepository(Protocol):
    def get(self) -> Optional[AdminConfig]:
        raise NotImplementedError

    def save(self, *, username: str, password_hash: str) -> None:
        """Insert or replace the single admin row and mark it initialized."""

        raise NotImplementedError

    def update_password(self, password_hash: str) -> bool:
        raise NotImplementedError
