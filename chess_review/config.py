"""Chess review service configuration settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the analysis pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./chess_review.db"
    DATABASE_ECHO: bool = False

    # Claude AI
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-5-20250929"
    CLAUDE_MAX_TOKENS: int = 8192

    # Timeouts (seconds)
    REASONING_TIMEOUT: float = 180.0  # Bound on the whole analysis call
    PUZZLE_LINK_TIMEOUT: float = 15.0  # Bound on puzzle persistence

    # Identity
    GUEST_OWNER_ID: str = "guest"  # Sentinel owner id for unauthenticated submissions

    # Queue/Worker
    QUEUE_MAX_CONCURRENCY: int = 4  # Parallel job limit
    QUEUE_POLL_INTERVAL: int = 5  # Seconds between queue checks when idle
    QUEUE_BATCH_SIZE: int = 20  # Pending jobs fetched per poll

    # Dashboard
    DASHBOARD_RECENT_LIMIT: int = 5
    DASHBOARD_TOP_OPENINGS: int = 5
    DASHBOARD_COMPLETED_SCAN_LIMIT: int = 1000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
