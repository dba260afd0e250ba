"""
Application settings loaded from environment variables.
"""

from __future__ import annotations

from typing import List

from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing."""


class Settings(BaseSettings):
    # ── Database ─────────────────────────────────────────────────────────
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = ""
    db_password: str = ""
    db_name: str = ""
    db_sslmode: str = "disable"         # forwarded to asyncpg as ``ssl``
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = ""                # HMAC secret for auth tokens
    jwt_expiry_seconds: int = 86400     # 24 hours
    bcrypt_rounds: int = 12

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8080
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:9002"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def database_url(self) -> URL:
        """asyncpg connection URL assembled from the ``DB_*`` fields."""
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user or None,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name or None,
        )

    def missing_required(self) -> List[str]:
        required = {
            "DB_USER": self.db_user,
            "DB_PASSWORD": self.db_password,
            "DB_NAME": self.db_name,
            "JWT_SECRET": self.jwt_secret,
        }
        return [name for name, value in required.items() if not value]

    def validate_required(self) -> None:
        """
        Fail fast when credentials or the signing secret are absent.

        Called once on startup; a missing value is never a per-request error.
        """
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing)
            )


config = Settings()
