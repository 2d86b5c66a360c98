"""
Sentiment feed data models.

Wire format is camelCase JSON as served by the sentiment API; Python
attributes are snake_case through pydantic aliases.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Duration choices offered to users, in display order
DURATION_OPTIONS = ("1h", "2h", "4h", "1d", "2d", "1w")
DEFAULT_DURATION = "4h"


class ChartMode(str, Enum):
    """Metric family stacked by the chart."""

    TWEET_COUNT = "tweetCount"
    SENTIMENT = "sentiment"
    SENTIMENT_BY_FOLLOWERS = "sentimentByFollowers"

    @property
    def series_keys(self) -> tuple[str, ...]:
        """Dotted data keys for this mode, in stacking order (bottom up)."""
        if self is ChartMode.TWEET_COUNT:
            return ("tweetCount",)
        return tuple(f"{self.value}.{field}" for field in SENTIMENT_STACK_ORDER)


SENTIMENT_STACK_ORDER = ("unknown", "negative", "neutral", "positive")


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SentimentRatio(_WireModel):
    """
    Four-way sentiment breakdown for one time bucket.

    Values may be proportions or counts; they are charted as stacked
    areas so none of them may be negative.
    """

    positive: float = Field(ge=0)
    negative: float = Field(ge=0)
    neutral: float = Field(ge=0)
    unknown: float = Field(ge=0)


class Sample(_WireModel):
    """One time-bucketed record returned by the sentiment API."""

    model_config = ConfigDict(extra="allow")

    time_ms: int = Field(description="Bucket time, epoch milliseconds")
    coin: str
    tweet_ids: tuple[str, ...] = Field(description="Source posts for this bucket")
    usd_rate: float
    score: str
    score_by_followers: str
    sentiment: SentimentRatio
    sentiment_by_followers: SentimentRatio

    @field_validator("score", "score_by_followers", mode="before")
    @classmethod
    def numeric_to_string(cls, v: Any) -> Any:
        """Scores arrive as numeric strings; accept bare numbers too."""
        if isinstance(v, bool):
            return v
        if isinstance(v, (int, float)):
            return str(v)
        return v

    def to_chart_dict(self) -> dict[str, Any]:
        """Return the camelCase wire shape, extras included."""
        return self.model_dump(by_alias=True, mode="json")


class ChartRow(Sample):
    """A Sample plus its derived tweet count."""

    tweet_count: int = Field(ge=0)

    @model_validator(mode="after")
    def check_tweet_count(self) -> "ChartRow":
        if self.tweet_count != len(self.tweet_ids):
            raise ValueError(
                f"tweetCount {self.tweet_count} does not match "
                f"{len(self.tweet_ids)} tweet ids"
            )
        return self


class FeedPage(_WireModel):
    """
    Decoded body of one paginated API response.

    A falsy next_start_time (missing, null or 0) means the series is
    exhausted.
    """

    results: list[Sample]
    next_start_time: int | None = None


class Window(BaseModel):
    """Query window in epoch milliseconds, both ends on whole minutes."""

    model_config = ConfigDict(frozen=True)

    start_ms: int
    end_ms: int

    @model_validator(mode="after")
    def check_order(self) -> "Window":
        if self.start_ms >= self.end_ms:
            raise ValueError(
                f"Window start {self.start_ms} must be before end {self.end_ms}"
            )
        return self

    @property
    def duration_ms(self) -> int:
        """Length of the window in milliseconds."""
        return self.end_ms - self.start_ms
