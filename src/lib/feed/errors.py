"""
Feed Errors
===========

Exception hierarchy for the sentiment feed pipeline.

For On-Call Engineers:
    Error codes and their meanings:
    - INVALID_DURATION: A duration code outside <int><h|d|w> reached the
      window calculator. Usually a bad DEFAULT_DURATION setting.
    - NETWORK_FAILURE: Request timed out, could not connect, or the API
      returned a non-success status. Retryable ones were already retried.
    - DECODE_FAILURE: The API answered 200 but the body was not the
      expected {"results": [...], "nextStartTime": ...} shape.
    - PAGINATION_STALLED: The API kept returning the same cursor or more
      pages than MAX_PAGES. The fetch was aborted instead of looping.

For Developers:
    - Catch FeedError at the service boundary, never lower
    - Only NetworkFailure with retryable=True is retried
    - DecodeFailure is a contract violation and is never retried
"""

from enum import Enum


class FeedErrorCode(str, Enum):
    """Machine-readable error codes, searchable in logs."""

    INVALID_DURATION = "INVALID_DURATION"
    NETWORK_FAILURE = "NETWORK_FAILURE"
    DECODE_FAILURE = "DECODE_FAILURE"
    PAGINATION_STALLED = "PAGINATION_STALLED"


class FeedError(Exception):
    """Base exception for feed pipeline errors."""

    error_code: FeedErrorCode = FeedErrorCode.NETWORK_FAILURE


class InvalidDurationCode(FeedError, ValueError):
    """Raised when a duration code cannot be parsed."""

    error_code = FeedErrorCode.INVALID_DURATION

    def __init__(self, code: str):
        super().__init__(f"Invalid duration code: {code!r}")
        self.code = code


class NetworkFailure(FeedError):
    """Raised when a request could not complete successfully."""

    error_code = FeedErrorCode.NETWORK_FAILURE

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        retryable: bool = True,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.retryable = retryable


class DecodeFailure(FeedError):
    """Raised when a response body is not valid JSON of the expected shape."""

    error_code = FeedErrorCode.DECODE_FAILURE

    def __init__(self, message: str, *, url: str | None = None):
        super().__init__(message)
        self.url = url


class PaginationStalled(FeedError):
    """Raised when the continuation cursor stops making progress."""

    error_code = FeedErrorCode.PAGINATION_STALLED

    def __init__(self, message: str, *, cursor: int | None = None, pages: int = 0):
        super().__init__(message)
        self.cursor = cursor
        self.pages = pages
