"""Pipeline configuration using Pydantic Settings.

Loads settings from environment variables and .env file.
All values are primitive scalars read once at startup; the timeouts and
batch sizes are tunables, not load-bearing constants.
"""

from __future__ import annotations

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Valid Python logging levels
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Fetch pipeline configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Logging ---
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level to uppercase.

        Falls back to INFO if an invalid level is provided.
        """
        normalized = v.upper().strip()
        if normalized not in VALID_LOG_LEVELS:
            # Log a warning (to stderr since logging may not be configured yet)
            import sys

            print(
                f"WARNING: Invalid LOG_LEVEL '{v}'. "
                f"Valid levels are: {', '.join(sorted(VALID_LOG_LEVELS))}. "
                "Falling back to INFO.",
                file=sys.stderr,
            )
            return "INFO"
        return normalized

    def get_log_level_int(self) -> int:
        """Return the integer value of the configured log level."""
        return getattr(logging, self.log_level, logging.INFO)

    # --- Browser backend ---
    navigation_timeout_seconds: float = 45.0
    selector_timeout_seconds: float = 2.0  # per content selector
    content_wait_budget_seconds: float = 10.0  # across all content selectors
    playwright_headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    # --- Content validation ---
    min_content_length: int = 100
    min_meaningful_chars: int = 50

    # --- HTTP backend ---
    enable_http_backend: bool = True
    http_timeout_seconds: float = 30.0
    max_content_size_mb: int = 20

    # --- Managed extraction backend (Crawl4AI-compatible) ---
    # Disabled unless a base URL is configured
    managed_backend_base_url: str | None = None
    managed_backend_api_key: str | None = None
    managed_backend_timeout_seconds: float = 60.0

    # --- Batch concurrency ---
    batch_window_size: int = 3
    batch_pause_seconds: float = 1.0

    @field_validator("batch_window_size")
    @classmethod
    def validate_batch_window_size(cls, v: int) -> int:
        """Window size must allow at least one in-flight fetch."""
        if v < 1:
            raise ValueError("batch_window_size must be >= 1")
        return v

    @field_validator("managed_backend_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Normalize the base URL so path joins stay predictable."""
        if v is None:
            return None
        v = v.strip().rstrip("/")
        return v or None


settings = Settings()
