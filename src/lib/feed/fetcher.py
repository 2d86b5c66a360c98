"""
Paginated Sentiment Feed Fetcher
================================

Fetches a sample series from the sentiment API by following the
server-supplied continuation cursor until it is exhausted.

For On-Call Engineers:
    Request shape: GET {API_URL}/{asset}/{cursor}/{endMs}
    Response shape: {"results": [...], "nextStartTime": <ms> | 0}

    Common issues:
    - NETWORK_FAILURE after retries: API down or API_URL wrong
    - DECODE_FAILURE: API contract changed, check a raw response with curl
    - PAGINATION_STALLED: API returned the same nextStartTime twice or
      more than MAX_PAGES pages; the fetch is aborted instead of hanging

For Developers:
    - Pages are fetched strictly in sequence; each cursor comes from the
      previous response
    - Any failure aborts the whole fetch, callers never see a partial list
    - Only timeouts, connection errors, 429 and 5xx are retried
    - Responses are cached by request URL only after they validate
"""

import logging
from typing import Any

import requests
from pydantic import ValidationError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from src.lib.feed.cache import ResponseCache, get_global_cache
from src.lib.feed.errors import DecodeFailure, NetworkFailure, PaginationStalled
from src.lib.feed.models import FeedPage, Sample
from src.lib.logging_utils import sanitize_for_log

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_PAGES = 500

# Retry configuration
MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 0.5
MAX_BACKOFF_SECONDS = 8


def build_request_key(base_url: str, asset_id: str, cursor: int, end_ms: int) -> str:
    """Build the request URL, which doubles as the cache key."""
    return f"{base_url.rstrip('/')}/{asset_id}/{cursor}/{end_ms}"


def _is_retryable(exception: BaseException) -> bool:
    """Check if a failure is transient."""
    return isinstance(exception, NetworkFailure) and exception.retryable


class PaginatedFetcher:
    """
    Follows nextStartTime cursors and concatenates every page's results.

    Attributes:
        base_url: API base URL without trailing slash
        cache: Response cache shared with other fetchers
        timeout_seconds: Per-request timeout
        max_pages: Upper bound on pages per fetch_all() call
    """

    def __init__(
        self,
        base_url: str,
        *,
        cache: ResponseCache | None = None,
        session: requests.Session | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_pages: int = DEFAULT_MAX_PAGES,
        retry_attempts: int = MAX_RETRIES,
        retry_backoff_seconds: float = INITIAL_BACKOFF_SECONDS,
    ):
        """
        Initialize the fetcher.

        Args:
            base_url: API base URL, e.g. https://api.example.com/trends
            cache: Cache to use (defaults to the process-wide cache)
            session: requests session (a new one is created if omitted)
            timeout_seconds: Per-request timeout
            max_pages: Pagination safety bound
            retry_attempts: Total attempts for retryable failures
            retry_backoff_seconds: Initial exponential backoff
        """
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")
        if retry_attempts < 1:
            raise ValueError(f"retry_attempts must be at least 1, got {retry_attempts}")

        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else get_global_cache()
        self.timeout_seconds = timeout_seconds
        self.max_pages = max_pages
        self.retry_attempts = retry_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self._session = session or requests.Session()

    def fetch_all(self, asset_id: str, start_ms: int, end_ms: int) -> list[Sample]:
        """
        Fetch every sample between start_ms and end_ms.

        Args:
            asset_id: Asset identifier, e.g. "bitcoin"
            start_ms: First cursor (window start), epoch milliseconds
            end_ms: Window end, epoch milliseconds

        Returns:
            All pages' results concatenated in server order

        Raises:
            NetworkFailure: Request failed (after retries where applicable)
            DecodeFailure: Response body was not the expected shape
            PaginationStalled: Cursor repeated or max_pages exceeded
        """
        results: list[Sample] = []
        cursor: int | None = start_ms
        pages = 0
        cache_hits = 0

        while cursor:
            if pages >= self.max_pages:
                logger.error(
                    "Pagination exceeded page limit",
                    extra={"max_pages": self.max_pages, "cursor": cursor},
                )
                raise PaginationStalled(
                    f"Exceeded {self.max_pages} pages without exhausting cursor",
                    cursor=cursor,
                    pages=pages,
                )

            key = build_request_key(self.base_url, asset_id, cursor, end_ms)
            page, cache_hit = self._fetch_page(key)
            pages += 1
            cache_hits += int(cache_hit)
            results.extend(page.results)

            logger.debug(
                "Fetched page",
                extra={
                    "url": sanitize_for_log(key),
                    "cache_hit": cache_hit,
                    "page_size": len(page.results),
                    "next_start_time": page.next_start_time,
                },
            )

            next_cursor = page.next_start_time
            if next_cursor and next_cursor == cursor:
                logger.error(
                    "Pagination cursor did not advance",
                    extra={"cursor": cursor, "pages": pages},
                )
                raise PaginationStalled(
                    f"nextStartTime {next_cursor} repeats the current cursor",
                    cursor=cursor,
                    pages=pages,
                )
            cursor = next_cursor

        logger.info(
            f"Fetched {len(results)} samples in {pages} pages",
            extra={
                "asset_id": sanitize_for_log(asset_id),
                "start_ms": start_ms,
                "end_ms": end_ms,
                "pages": pages,
                "cache_hits": cache_hits,
            },
        )

        return results

    def _fetch_page(self, key: str) -> tuple[FeedPage, bool]:
        """
        Resolve one page through the cache.

        Returns:
            (page, cache_hit)
        """
        cached = self.cache.get(key)
        if cached is not None:
            return self._parse_page(cached, key), True

        retryer = Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(
                multiplier=self.retry_backoff_seconds, max=MAX_BACKOFF_SECONDS
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        body = retryer(self._get_json, key)
        page = self._parse_page(body, key)
        self.cache.put(key, body)
        return page, False

    def _get_json(self, url: str) -> Any:
        """
        Issue a single GET and decode the JSON body.

        Raises:
            NetworkFailure: On timeout, connection error or non-2xx status
            DecodeFailure: If the body is not JSON
        """
        try:
            response = self._session.get(
                url,
                headers={
                    "Accept": "application/json",
                    "User-Agent": "SentimentTracker/1.0",
                },
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkFailure(
                f"Request timed out after {self.timeout_seconds}s", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkFailure(f"Request failed: {e}", url=url) from e

        status = response.status_code
        if not 200 <= status < 300:
            retryable = status == 429 or status >= 500
            raise NetworkFailure(
                f"API error {status}: {sanitize_for_log(response.text)}",
                url=url,
                status_code=status,
                retryable=retryable,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DecodeFailure("Response body is not valid JSON", url=url) from e

    @staticmethod
    def _parse_page(body: Any, url: str) -> FeedPage:
        """Validate a decoded body into a FeedPage."""
        if not isinstance(body, dict):
            raise DecodeFailure(
                f"Expected a JSON object, got {type(body).__name__}", url=url
            )
        try:
            return FeedPage.model_validate(body)
        except ValidationError as e:
            raise DecodeFailure(
                f"Unexpected response shape ({e.error_count()} errors)", url=url
            ) from e


def fetch_all(
    base_url: str,
    asset_id: str,
    start_ms: int,
    end_ms: int,
    **kwargs: Any,
) -> list[Sample]:
    """
    Convenience function: fetch a series with a one-off fetcher.

    Uses the process-wide cache unless a cache is passed in kwargs.
    """
    return PaginatedFetcher(base_url, **kwargs).fetch_all(asset_id, start_ms, end_ms)
