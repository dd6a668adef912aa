"""
Settings for the milestone service.

Values come from the process environment or a local ``.env`` file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration; names match the environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # --- runtime ---
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # --- storage ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./collab.db"
    DATABASE_ECHO: bool = False

    # --- auth ---
    # mock: bearer token is "<role>:<user_id>" (or just a user id)
    # jwt:  HS256 token signed with JWT_SECRET, claims "sub" and "role"
    AUTH_PROVIDER: Literal["mock", "jwt"] = "mock"
    AUTH_REQUIRED: bool = False
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "collab-local"

    # --- http ---
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # --- submissions ---
    SUBMISSION_MAX_FILES: int = 10
    SUBMISSION_MAX_FILE_BYTES: int = 10 * 1024 * 1024
    SUBMISSION_NOTES_MAX_LENGTH: int = 2000

    # --- portfolio and reputation ---
    DEFAULT_CURRENCY: str = "USD"
    PORTFOLIO_DEFAULT_ROLE: str = "Project Contributor"
    REPUTATION_PROJECT_CAP: int = 10


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()
