"""
Sentiment feed library.

Incremental acquisition and assembly of the price/sentiment time series:
- Relative window calculation from duration codes
- Request-keyed response caching
- Cursor-following paginated fetch
- Chart row transformation
"""

from src.lib.feed.cache import CacheStats, ResponseCache, get_global_cache
from src.lib.feed.errors import (
    DecodeFailure,
    FeedError,
    FeedErrorCode,
    InvalidDurationCode,
    NetworkFailure,
    PaginationStalled,
)
from src.lib.feed.fetcher import PaginatedFetcher, build_request_key, fetch_all
from src.lib.feed.models import (
    DEFAULT_DURATION,
    DURATION_OPTIONS,
    ChartMode,
    ChartRow,
    FeedPage,
    Sample,
    SentimentRatio,
    Window,
)
from src.lib.feed.transform import series_values, transform
from src.lib.feed.window import compute_window, now_ms, parse_duration_code

__all__ = [
    "CacheStats",
    "ResponseCache",
    "get_global_cache",
    "FeedError",
    "FeedErrorCode",
    "InvalidDurationCode",
    "NetworkFailure",
    "DecodeFailure",
    "PaginationStalled",
    "PaginatedFetcher",
    "build_request_key",
    "fetch_all",
    "DEFAULT_DURATION",
    "DURATION_OPTIONS",
    "ChartMode",
    "ChartRow",
    "FeedPage",
    "Sample",
    "SentimentRatio",
    "Window",
    "transform",
    "series_values",
    "compute_window",
    "now_ms",
    "parse_duration_code",
]
