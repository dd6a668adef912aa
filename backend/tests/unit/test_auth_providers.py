"""
Tests for the mock and JWT auth providers.
"""

import pytest
from jose import jwt

from collab.core.config import Settings
from collab.core.exceptions import AuthenticationError
from collab.infrastructure.auth.jwt_auth import JwtAuthProvider
from collab.infrastructure.local.mock_auth import MockAuthProvider
from collab.models.enums import UserRole

SECRET = "test-secret"


class TestMockAuthProvider:
    @pytest.mark.parametrize(
        "token, user_id, role",
        [
            ("partner:partner-1", "partner-1", UserRole.PARTNER),
            ("super-admin:admin-1", "admin-1", UserRole.SUPER_ADMIN),
            ("student-7", "student-7", UserRole.STUDENT),
            ("dev_user", "dev_user", UserRole.SUPER_ADMIN),
            ("test_user", "test_user", UserRole.STUDENT),
        ],
    )
    async def test_resolves_token(self, token, user_id, role):
        actor = await MockAuthProvider().verify_token(token)
        assert actor.id == user_id
        assert actor.role == role

    async def test_unknown_role(self):
        with pytest.raises(AuthenticationError, match="Unknown role"):
            await MockAuthProvider().verify_token("wizard:someone")

    async def test_empty_token(self):
        with pytest.raises(AuthenticationError):
            await MockAuthProvider().verify_token("  ")

    def test_enabled_flag(self):
        assert MockAuthProvider(enabled=True).is_enabled()
        assert not MockAuthProvider().is_enabled()


class TestJwtAuthProvider:
    @pytest.fixture
    def settings(self):
        return Settings(AUTH_PROVIDER="jwt", JWT_SECRET=SECRET, JWT_ISSUER="collab-local")

    async def test_valid_token(self, settings):
        token = jwt.encode({"sub": "partner-1", "role": "partner", "iss": "collab-local"}, SECRET, algorithm="HS256")
        actor = await JwtAuthProvider(settings).verify_token(token)
        assert actor.id == "partner-1"
        assert actor.role == UserRole.PARTNER

    async def test_role_defaults_to_student(self, settings):
        token = jwt.encode({"sub": "student-1", "iss": "collab-local"}, SECRET, algorithm="HS256")
        actor = await JwtAuthProvider(settings).verify_token(token)
        assert actor.role == UserRole.STUDENT

    @pytest.mark.parametrize(
        "claims, key",
        [
            ({"sub": "partner-1", "iss": "collab-local"}, "wrong-secret"),
            ({"sub": "partner-1", "iss": "someone-else"}, SECRET),
            ({"iss": "collab-local"}, SECRET),
            ({"sub": "partner-1", "role": "wizard", "iss": "collab-local"}, SECRET),
        ],
    )
    async def test_rejected_tokens(self, settings, claims, key):
        token = jwt.encode(claims, key, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            await JwtAuthProvider(settings).verify_token(token)

    async def test_garbage_token(self, settings):
        with pytest.raises(AuthenticationError):
            await JwtAuthProvider(settings).verify_token("not-a-jwt")

    def test_secret_required(self):
        with pytest.raises(ValueError):
            JwtAuthProvider(Settings(AUTH_PROVIDER="jwt", JWT_SECRET=""))
