"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from comment_stats.models import RECENT_COMMENTS_MAX


class Settings(BaseSettings):
    """Application settings loaded from ``COMMENT_STATS_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COMMENT_STATS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Comment Stats"
    app_version: str = "0.1.0"

    # JSON document with users, content and comments to load on startup.
    seed_file: str = ""

    session_ttl_minutes: int = Field(default=30, ge=1)
    session_cleanup_interval_seconds: int = Field(default=300, ge=1)

    recent_comments_limit: int = Field(default=RECENT_COMMENTS_MAX, ge=0, le=RECENT_COMMENTS_MAX)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
