"""
Service-level errors.

Each kind maps to one HTTP status in ``main.py``; the core never raises
framework exceptions itself.
"""

from typing import Any, Optional


class CollabError(Exception):
    """Root of every error the services raise on purpose."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(CollabError):
    """Unknown proposal, milestone or notification id."""


class ValidationError(CollabError):
    """Malformed or missing input; ``field`` names the offending attribute."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.field = field


class InvalidStateError(CollabError):
    """Operation attempted from a status that does not permit it."""

    def __init__(self, message: str, current_status: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.current_status = current_status


class ConcurrencyError(InvalidStateError):
    """The record changed between read and write (stale version)."""


class AuthenticationError(CollabError):
    """Missing, malformed or unverifiable credentials."""


class AuthorizationError(CollabError):
    pass


class ForbiddenError(AuthorizationError):
    """Role or ownership rule denied the action."""
