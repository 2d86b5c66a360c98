"""
Relative time window calculation.

Maps a duration code such as "4h" and a reference instant to the
[start, end] query window used by the paginated fetcher. Both ends are
floored to whole minutes so repeated requests within the same minute hit
the same cache keys.
"""

import re
from datetime import UTC, datetime

from src.lib.feed.errors import InvalidDurationCode
from src.lib.feed.models import Window

DURATION_PATTERN = re.compile(r"([0-9]+)([hdw])")

UNIT_SECONDS = {
    "h": 3600,
    "d": 86400,
    "w": 604800,
}

MINUTE_MS = 60_000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)


def truncate_to_minute(timestamp_ms: int) -> int:
    """Zero the seconds and sub-second part of an epoch-ms timestamp."""
    return timestamp_ms - timestamp_ms % MINUTE_MS


def parse_duration_code(duration_code: str) -> int:
    """
    Parse a duration code into milliseconds.

    Args:
        duration_code: "<integer><unit>" where unit is h, d or w

    Returns:
        int: Duration in milliseconds

    Raises:
        InvalidDurationCode: If the code is malformed or has zero magnitude
    """
    if not isinstance(duration_code, str):
        raise InvalidDurationCode(str(duration_code))

    match = DURATION_PATTERN.fullmatch(duration_code)
    if match is None:
        raise InvalidDurationCode(duration_code)

    magnitude = int(match.group(1))
    if magnitude == 0:
        raise InvalidDurationCode(duration_code)

    return magnitude * UNIT_SECONDS[match.group(2)] * 1000


def compute_window(duration_code: str, reference_ms: int) -> Window:
    """
    Compute the query window ending at a reference instant.

    Args:
        duration_code: Relative span, e.g. "1h", "2d", "1w"
        reference_ms: Window end before truncation, epoch milliseconds

    Returns:
        Window: start/end both floored to whole minutes

    Raises:
        InvalidDurationCode: If duration_code does not parse

    Example:
        >>> compute_window("1h", 1704110430500)
        Window(start_ms=1704106800000, end_ms=1704110400000)
    """
    offset_ms = parse_duration_code(duration_code)
    start_ms = truncate_to_minute(reference_ms - offset_ms)
    end_ms = truncate_to_minute(reference_ms)
    return Window(start_ms=start_ms, end_ms=end_ms)
