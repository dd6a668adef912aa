"""
Authentication provider interface.

Resolves a bearer token into the acting user; the resulting ``Actor`` is
passed explicitly into every lifecycle call.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from collab.models.enums import UserRole


class Actor(BaseModel):
    """The user performing a request."""

    id: str
    role: UserRole


class IAuthProvider(ABC):
    """Interface for authentication providers."""

    @abstractmethod
    async def verify_token(self, token: str) -> Actor:
        """
        Verify a bearer token.

        Raises:
            AuthenticationError: If the token is invalid
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Whether a token is required on every request."""
        pass
