"""
Fetch coordinator settings using Pydantic Settings.

Every rate-limit and cache tunable of the frontend lives here instead of being
scattered as magic numbers. Values are read from environment variables with the
``ANICRUNCH_`` prefix (or a ``.env`` file) and validated on construction.

Usage:
    from frontend.settings import CoordinatorSettings

    settings = CoordinatorSettings(critical_delay_ms=50)
    coordinator = FetchCoordinator(settings)

Environment Variables (all optional):
    - ANICRUNCH_CRITICAL_DELAY_MS: spacing between calls on the critical lane (200)
    - ANICRUNCH_BACKGROUND_DELAY_MS: spacing between calls on the background lane (800)
    - ANICRUNCH_MAX_RETRIES: attempts per logical fetch (3)
    - ANICRUNCH_BASE_BACKOFF_MS: base backoff between attempts (1000)
    - ANICRUNCH_CACHE_TTL_MS: lifetime of a cached response (300000)
    - ANICRUNCH_CACHE_MAX_ENTRIES: entry count that triggers a full clear (100)
    - ANICRUNCH_UPSTREAM_BASE_URL: Jikan base URL
    - ANICRUNCH_BACKEND_BASE_URL: AniCrunch backend base URL
    - ANICRUNCH_LOG_LEVEL: level of the frontend package logger (INFO)
"""
from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from frontend.config import (
    CARDS_PER_PAGE,
    GENRE_PAGE_SIZE,
    HERO_INTERVAL_MS,
    JIKAN_BASE_URL,
    SEARCH_DEBOUNCE_MS,
)


class CoordinatorSettings(BaseSettings):
    """Tunables for the queue, retry policy, cache and view controller."""

    model_config = SettingsConfigDict(
        env_prefix="ANICRUNCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Queue lanes
    # =========================================================================
    critical_delay_ms: int = Field(
        default=200,
        ge=0,
        description="Delay before each call on the critical lane"
    )
    background_delay_ms: int = Field(
        default=800,
        ge=0,
        description="Delay before each call on the background lane"
    )

    # =========================================================================
    # Retry policy
    # =========================================================================
    max_retries: int = Field(default=3, ge=1, le=10)
    base_backoff_ms: int = Field(
        default=1000,
        ge=0,
        description="Flat delay after a failed attempt; 429s back off base * 2**attempt"
    )

    # =========================================================================
    # Response cache
    # =========================================================================
    cache_ttl_ms: int = Field(default=300_000, ge=1)
    cache_max_entries: int = Field(
        default=100,
        ge=1,
        description="Storing beyond this many entries clears the whole cache first"
    )

    # =========================================================================
    # View controller
    # =========================================================================
    search_debounce_ms: int = Field(default=SEARCH_DEBOUNCE_MS, ge=0)
    hero_interval_ms: int = Field(default=HERO_INTERVAL_MS, ge=1)
    cards_per_page: int = Field(default=CARDS_PER_PAGE, ge=1)
    genre_page_size: int = Field(default=GENRE_PAGE_SIZE, ge=1, le=25)

    # =========================================================================
    # Endpoints
    # =========================================================================
    upstream_base_url: str = Field(default=JIKAN_BASE_URL)
    backend_base_url: str = Field(default="http://localhost:8000")
    http_timeout_s: float = Field(default=30.0, gt=0)

    log_level: str = Field(
        default="INFO",
        description="Level of the frontend package logger"
    )

    @field_validator("upstream_base_url", "backend_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Base URLs are joined with absolute paths."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper

    def lane_delay_ms(self, priority: str) -> int:
        """Spacing configured for a queue lane."""
        if priority == "critical":
            return self.critical_delay_ms
        if priority == "background":
            return self.background_delay_ms
        raise ValueError(f"Unknown priority: {priority}")
