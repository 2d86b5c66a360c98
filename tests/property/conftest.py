"""Hypothesis strategies for property testing.

Provides reusable composite strategies for generating data that matches
the sentiment API's wire contract.
"""

from hypothesis import strategies as st

from src.lib.feed import DURATION_OPTIONS

# 2020-01-01 .. 2030-01-01 in epoch milliseconds
MIN_EPOCH_MS = 1577836800000
MAX_EPOCH_MS = 1893456000000


def epoch_ms():
    """Epoch-millisecond instants in a realistic range."""
    return st.integers(min_value=MIN_EPOCH_MS, max_value=MAX_EPOCH_MS)


@st.composite
def duration_code(draw, enumerated_only=False):
    """Generate valid duration codes.

    Args:
        draw: Hypothesis draw function
        enumerated_only: Only draw from the user-facing options
    """
    if enumerated_only:
        return draw(st.sampled_from(DURATION_OPTIONS))
    magnitude = draw(st.integers(min_value=1, max_value=52))
    unit = draw(st.sampled_from(["h", "d", "w"]))
    return f"{magnitude}{unit}"


@st.composite
def sentiment_ratio(draw):
    """Generate a non-negative four-way sentiment breakdown."""
    value = st.floats(min_value=0.0, max_value=1e6, allow_nan=False, allow_infinity=False)
    return {
        "positive": draw(value),
        "negative": draw(value),
        "neutral": draw(value),
        "unknown": draw(value),
    }


@st.composite
def sample_payload(draw, time_ms=None):
    """Generate one sample in camelCase wire format."""
    return {
        "timeMs": time_ms if time_ms is not None else draw(epoch_ms()),
        "coin": "bitcoin",
        "tweetIds": draw(
            st.lists(st.text(alphabet="0123456789", min_size=1, max_size=19), max_size=30)
        ),
        "usdRate": draw(
            st.floats(min_value=0.01, max_value=1e7, allow_nan=False, allow_infinity=False)
        ),
        "score": str(draw(st.floats(min_value=-1, max_value=1, allow_nan=False))),
        "scoreByFollowers": str(draw(st.floats(min_value=-1, max_value=1, allow_nan=False))),
        "sentiment": draw(sentiment_ratio()),
        "sentimentByFollowers": draw(sentiment_ratio()),
    }


@st.composite
def sample_series(draw, max_size=20):
    """Generate samples with strictly increasing timeMs."""
    start = draw(epoch_ms())
    gaps = draw(st.lists(st.integers(min_value=1, max_value=3600), max_size=max_size))
    times = []
    current = start
    for gap in gaps:
        current += gap * 60_000
        times.append(current)
    return [draw(sample_payload(time_ms=t)) for t in times]
