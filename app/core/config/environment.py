"""Environment-aware settings loader."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict, Type

from .settings import Settings


class DevelopmentSettings(Settings):
    """Settings tuned for local development."""

    environment: str = "development"


class ProductionSettings(Settings):
    """Settings tuned for production (JSON logs are expected to be enabled via env)."""

    environment: str = "production"


class TestSettings(Settings):
    """Settings tuned for automated tests (prefers the test DB URL)."""

    environment: str = "test"

    def model_post_init(self, __context) -> None:
        super().model_post_init(__context)
        if self.test_database_url:
            object.__setattr__(self, "database_url", self.test_database_url)


ENVIRONMENTS: Dict[str, Type[Settings]] = {
    "development": DevelopmentSettings,
    "dev": DevelopmentSettings,
    "production": ProductionSettings,
    "prod": ProductionSettings,
    "test": TestSettings,
    "testing": TestSettings,
}


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance keyed by APP_ENV to avoid repeated disk/env reads."""
    env = os.getenv("APP_ENV", "production").lower()
    settings_cls = ENVIRONMENTS.get(env, ProductionSettings)
    return settings_cls()
