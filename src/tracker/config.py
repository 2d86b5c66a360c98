"""
Sentiment Tracker Configuration
===============================

Parses and validates configuration from environment variables.

For On-Call Engineers:
    Environment variables:
    - API_URL: Base URL of the sentiment API (required)
    - ASSET_ID: Tracked asset (default: bitcoin)
    - DEFAULT_DURATION: Initial window, one of 1h,2h,4h,1d,2d,1w (default: 4h)
    - REQUEST_TIMEOUT_SECONDS: Per-request timeout (default: 30)
    - MAX_PAGES: Pagination safety bound (default: 500)
    - RETRY_ATTEMPTS: Attempts for transient network failures (default: 3)
    - CACHE_MAX_ENTRIES: Optional LRU bound for the response cache
      (default: unset, unbounded)

For Developers:
    - Use get_config() to load all configuration
    - Configuration is validated on load
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from src.lib.feed.models import DEFAULT_DURATION, DURATION_OPTIONS
from src.lib.logging_utils import sanitize_for_log

logger = logging.getLogger(__name__)

DEFAULT_ASSET_ID = "bitcoin"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_PAGES = 500
DEFAULT_RETRY_ATTEMPTS = 3


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


@dataclass
class TrackerConfig:
    """
    Configuration for the sentiment tracker.

    All fields are validated on instantiation.
    """

    api_url: str
    asset_id: str = DEFAULT_ASSET_ID
    default_duration: str = DEFAULT_DURATION
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    max_pages: int = DEFAULT_MAX_PAGES
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    cache_max_entries: int | None = None

    def __post_init__(self):
        """Normalise and validate configuration after initialization."""
        self.api_url = self.api_url.strip().rstrip("/")
        self._validate()

    def _validate(self):
        """
        Validate all configuration values.

        Raises:
            ConfigurationError: If any validation fails
        """
        if not self.api_url:
            raise ConfigurationError("API_URL is required")

        parsed = urlparse(self.api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"API_URL must be an http(s) URL: {sanitize_for_log(self.api_url)}"
            )

        if not self.asset_id or self.asset_id != self.asset_id.lower():
            raise ConfigurationError(
                f"ASSET_ID must be a lowercase identifier: {self.asset_id!r}"
            )

        if self.default_duration not in DURATION_OPTIONS:
            raise ConfigurationError(
                f"DEFAULT_DURATION must be one of {', '.join(DURATION_OPTIONS)}, "
                f"got {self.default_duration!r}"
            )

        if self.request_timeout_seconds <= 0:
            raise ConfigurationError("REQUEST_TIMEOUT_SECONDS must be positive")

        if self.max_pages < 1:
            raise ConfigurationError("MAX_PAGES must be at least 1")

        if self.retry_attempts < 1:
            raise ConfigurationError("RETRY_ATTEMPTS must be at least 1")

        if self.cache_max_entries is not None and self.cache_max_entries < 1:
            raise ConfigurationError("CACHE_MAX_ENTRIES must be at least 1 when set")


def get_config() -> TrackerConfig:
    """
    Load and validate configuration from environment variables.

    Returns:
        TrackerConfig with all settings

    Raises:
        ConfigurationError: If required vars missing or invalid
    """
    cache_max_entries = os.environ.get("CACHE_MAX_ENTRIES", "").strip()

    config = TrackerConfig(
        api_url=os.environ.get("API_URL", ""),
        asset_id=os.environ.get("ASSET_ID", DEFAULT_ASSET_ID),
        default_duration=os.environ.get("DEFAULT_DURATION", DEFAULT_DURATION),
        request_timeout_seconds=_parse_number(
            "REQUEST_TIMEOUT_SECONDS", float, DEFAULT_REQUEST_TIMEOUT_SECONDS
        ),
        max_pages=_parse_number("MAX_PAGES", int, DEFAULT_MAX_PAGES),
        retry_attempts=_parse_number("RETRY_ATTEMPTS", int, DEFAULT_RETRY_ATTEMPTS),
        cache_max_entries=(
            _parse_number("CACHE_MAX_ENTRIES", int, None) if cache_max_entries else None
        ),
    )

    logger.info(
        "Configuration loaded",
        extra={
            "api_url": sanitize_for_log(config.api_url),
            "asset_id": config.asset_id,
            "default_duration": config.default_duration,
            "max_pages": config.max_pages,
            "cache_max_entries": config.cache_max_entries,
        },
    )

    return config


def _parse_number(name: str, cast, default):
    """Read a numeric env var, raising ConfigurationError on bad input."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
