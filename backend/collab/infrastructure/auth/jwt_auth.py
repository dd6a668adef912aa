"""
HMAC JWT authentication provider.
"""

from __future__ import annotations

from jose import JWTError, jwt

from collab.core.config import Settings
from collab.core.exceptions import AuthenticationError
from collab.interfaces.auth_provider import Actor, IAuthProvider
from collab.models.enums import UserRole


class JwtAuthProvider(IAuthProvider):
    """Validates tokens signed with the shared secret; claims carry the role."""

    def __init__(self, settings: Settings):
        if not settings.JWT_SECRET:
            raise ValueError("JWT_SECRET must be set for jwt auth")
        self._settings = settings

    def _decode_token(self, token: str) -> dict[str, object]:
        options = {"verify_iss": bool(self._settings.JWT_ISSUER)}
        return jwt.decode(
            token,
            self._settings.JWT_SECRET,
            algorithms=[self._settings.JWT_ALGORITHM],
            issuer=self._settings.JWT_ISSUER or None,
            options=options,
        )

    async def verify_token(self, token: str) -> Actor:
        try:
            claims = self._decode_token(token)
        except JWTError as exc:
            raise AuthenticationError("Invalid token") from exc
        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Missing subject")
        try:
            role = UserRole(claims.get("role", UserRole.STUDENT.value))
        except ValueError as exc:
            raise AuthenticationError("Invalid role claim") from exc
        return Actor(id=str(subject), role=role)

    def is_enabled(self) -> bool:
        return True
