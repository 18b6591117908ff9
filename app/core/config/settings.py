"""Application settings loaded from environment with safe fallbacks.

Environment precedence:
- Loads `.env` from the repo root before reading process env vars.
- Most values are pulled straight from env; booleans go through `_env_flag` so `"0"/"false"` work.
- CORS is normalized from `CORS_ORIGINS` (comma-separated) with a permissive local default.

Key expectations (defaults in parentheses):
- `APP_ENV` controls settings class selection (`production` default).
- Database: `DATABASE_URL` or `TEST_DATABASE_URL`, falling back to a local SQLite file.
- Auth: `SECRET_KEY` / `ALGORITHM` (HS256) sign bearer tokens valid for
  `ACCESS_TOKEN_EXPIRE_MINUTES` (24h).
"""

import logging
import os
from pathlib import Path
from typing import ClassVar, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# (__file__ is app/core/config/settings.py, so we need to traverse three levels up)
BASE_DIR = Path(__file__).resolve().parents[3]


load_dotenv(BASE_DIR / ".env")

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_URL = "sqlite:///./educonnect.db"


def _env_flag(name: str, *, default: Optional[bool] = False) -> Optional[bool]:
    """
    Helper to parse boolean-like environment variables.
    """
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Behavior highlights:
    - Loads `.env` at repo root, then lets process env override.
    - Test runs never touch the runtime database unless it is SQLite or carries a `_test` suffix.
    - CORS origins normalized once to avoid mutation side effects in settings instances.
    """

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = os.getenv("DATABASE_URL")
    test_database_url: Optional[str] = os.getenv("TEST_DATABASE_URL")
    environment: str = os.getenv("APP_ENV", "production")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: Optional[str] = os.getenv("LOG_DIR")
    use_json_logs: bool = bool(_env_flag("USE_JSON_LOGS", default=False))
    allowed_origins: list[str] = []

    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24)
    )

    SITE_NAME: str = os.getenv("SITE_NAME", "EduConnect")
    PAYMENT_PHONE_NUMBER: str = os.getenv("PAYMENT_PHONE_NUMBER", "")
    CHAT_HISTORY_LIMIT: int = int(os.getenv("CHAT_HISTORY_LIMIT", 50))

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        env_override = os.getenv("APP_ENV")
        if env_override:
            object.__setattr__(self, "environment", env_override)

        cors_env = os.getenv("CORS_ORIGINS")
        if cors_env:
            origins = [
                origin.strip() for origin in cors_env.split(",") if origin.strip()
            ]
        elif self.allowed_origins:
            origins = self.allowed_origins
        else:
            origins = ["*"]
        object.__setattr__(self, "allowed_origins", origins)

        if self.secret_key == "dev-secret-change-me" and self.environment.lower() in {
            "production",
            "prod",
        }:
            logger.warning("SECRET_KEY is not set; using the development default.")

    def get_database_url(self, *, use_test: bool = False) -> str:
        """Resolve the SQLAlchemy database URL for runtime or tests.

        Priority: `TEST_DATABASE_URL` when requested, then `DATABASE_URL`,
        finally the local SQLite file. Test URLs must be SQLite or name a
        dedicated `_test` database.
        """
        if use_test and self.test_database_url:
            test_url = self.test_database_url
            if not test_url.startswith("sqlite") and "_test" not in test_url:
                raise ValueError(
                    "Test database URL must point to a dedicated test database (contains '_test')."
                )
            return test_url

        if self.database_url:
            return self.database_url

        return DEFAULT_SQLITE_URL
