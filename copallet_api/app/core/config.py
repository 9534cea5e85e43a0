"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts with an in-memory store and seeded demo accounts.  In a
production deployment you should at least override the secrets.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "CoPallet API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = _env_bool("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Access and refresh tokens are signed with separate secrets.
    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-key")
    refresh_secret_key: str = os.getenv("REFRESH_SECRET_KEY", "dev-refresh-secret")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    refresh_token_expire_minutes: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # ``:memory:`` selects a named shared in-memory SQLite database that
    # lives as long as the process.  Any other value is treated as a
    # file path (relative paths resolve against the project root).
    database_url: str = os.getenv("DATABASE_URL", ":memory:")

    # Wipe the store and load the demo fixtures on startup.
    seed_on_startup: bool = _env_bool("SEED_ON_STARTUP", "true")
    seed_password: str = os.getenv("SEED_PASSWORD", "admin123")

    # Self-service signup with role ``admin``.  Disabled unless explicitly
    # allowed; admins are otherwise created by the seed or the CLI.
    allow_admin_signup: bool = _env_bool("ALLOW_ADMIN_SIGNUP", "false")

    cors_origins: List[str] = field(
        default_factory=lambda: _env_list(
            "CORS_ORIGINS",
            "http://localhost:5173,http://localhost:3000,http://localhost:8080",
        )
    )


# Read once at import time; set environment variables before importing.
settings = Settings()
