"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden with an APP_CACHE_* environment variable
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - One pooled connection by default: SQLite serializes writers anyway, queueing at
      the pool avoids "database is locked" under concurrent coroutines
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from appcache.core.domain_types import DEFAULT_MAX_AGE_MS


class Settings(BaseSettings):
    """App cache settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="APP_CACHE_", env_file=".env", case_sensitive=False,
    )

    # Storage
    database_url: str = "sqlite+aiosqlite:///./app-cache.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_sqlite_url(cls, v: str) -> str:
        """Plain sqlite:// URLs get the async driver."""
        if isinstance(v, str) and v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    database_pool_size: int = 1
    database_max_overflow: int = 0

    # Staleness
    cache_max_age_ms: int = DEFAULT_MAX_AGE_MS

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
