"""
Token-trusting auth for local development and tests.
"""

from collab.core.exceptions import AuthenticationError
from collab.interfaces.auth_provider import Actor, IAuthProvider
from collab.models.enums import UserRole

KNOWN_USERS = {
    "dev_user": Actor(id="dev_user", role=UserRole.SUPER_ADMIN),
    "test_user": Actor(id="test_user", role=UserRole.STUDENT),
}


class MockAuthProvider(IAuthProvider):
    """
    Reads the actor straight out of the token.

    ``"<role>:<user_id>"`` sets both; a bare id resolves to one of
    ``KNOWN_USERS`` or else to a student with that id.
    """

    def __init__(self, enabled: bool = False):
        self._required = enabled

    async def verify_token(self, token: str) -> Actor:
        token = token.strip()
        if not token:
            raise AuthenticationError("Empty token")
        if token in KNOWN_USERS:
            return KNOWN_USERS[token]

        role, sep, user_id = token.partition(":")
        if not sep:
            return Actor(id=token, role=UserRole.STUDENT)
        try:
            return Actor(id=user_id, role=UserRole(role))
        except ValueError as exc:
            raise AuthenticationError(f"Unknown role: {role}") from exc

    def is_enabled(self) -> bool:
        return self._required
