class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced course, lecturer or student does not exist."""


class NoActiveSessionError(DomainError):
    """Raised when a check-in targets a missing or closed session."""


class StoreError(Exception):
    """Base class for failures reported by the relational store."""


class DuplicateKeyError(StoreError):
    """A UNIQUE or PRIMARY KEY constraint rejected a write."""


class StoreUnavailableError(StoreError):
    """The store could not be reached or timed out. Safe to retry."""
