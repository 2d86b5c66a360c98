"""
Logging Utilities
=================

Helpers shared by the feed library and the tracker.

For On-Call Engineers:
    A failed fetch cycle is not a bug: the tracker surfaces it as an ERROR
    snapshot and logs it at WARNING. Under pytest the same record is
    emitted at DEBUG so error-path tests do not flood the output.

For Developers:
    - log_expected_warning() for failures the tracker already handles
    - sanitize_for_log() before logging anything read from the API or
      the environment (URLs, duration codes, response bodies)
    - get_safe_error_info() when the exception text itself may carry
      server-controlled content
"""

import logging
import re
import sys
from typing import Any

# Response bodies can be whole HTML error pages
MAX_LOG_INPUT_LENGTH = 200

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def _is_running_in_pytest() -> bool:
    return "pytest" in sys.modules


def log_expected_warning(logger: logging.Logger, message: str, **kwargs) -> None:
    """
    Log a handled failure at WARNING, or DEBUG when running under pytest.

    Args:
        logger: Module logger
        message: Log message
        **kwargs: Passed through to the logger (e.g. extra={})
    """
    level = logging.DEBUG if _is_running_in_pytest() else logging.WARNING
    logger.log(level, message, **kwargs)


def sanitize_for_log(value: Any, max_length: int = MAX_LOG_INPUT_LENGTH) -> str:
    """
    Flatten a value to one bounded line of printable text.

    Control characters (CR, LF and tab included) become spaces so a value
    cannot forge extra log lines.

    Example:
        >>> sanitize_for_log("502 Bad Gateway\\r\\n<html>")
        '502 Bad Gateway  <html>'
    """
    text = _CONTROL_CHARS.sub(" ", str(value))
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def get_safe_error_info(exception: Exception) -> dict[str, str]:
    """Describe an exception by type only, for use in extra={}."""
    return {"error_type": type(exception).__name__}
