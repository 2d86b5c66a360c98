"""
Series transformation for charting.

Turns raw samples into chart rows by adding the derived tweet count.
Nothing is filtered or reordered.
"""

from collections.abc import Iterable

from pydantic import ValidationError

from src.lib.feed.errors import DecodeFailure
from src.lib.feed.models import ChartMode, ChartRow, Sample


def transform(samples: Iterable[Sample]) -> list[ChartRow]:
    """
    Map samples to chart rows.

    Args:
        samples: Samples in server order

    Returns:
        list[ChartRow]: Same order, every original field kept, plus
        tweet_count = len(tweet_ids)

    Raises:
        DecodeFailure: If a sample cannot be turned into a valid row
    """
    return [_to_row(sample) for sample in samples]


def _to_row(sample: Sample) -> ChartRow:
    # Dump under wire names so an extra that reuses a field's Python name
    # (e.g. "time_ms") stays an extra instead of replacing the field
    data = sample.model_dump(by_alias=True)
    data["tweetCount"] = len(sample.tweet_ids)
    try:
        return ChartRow.model_validate(data)
    except ValidationError as e:
        raise DecodeFailure(
            f"Sample at {sample.time_ms} does not form a chart row "
            f"({e.error_count()} errors)"
        ) from e


def series_values(row: ChartRow, mode: ChartMode) -> dict[str, float]:
    """
    Flatten a row to the dotted data keys stacked for a chart mode.

    Example:
        >>> series_values(row, ChartMode.SENTIMENT)
        {'sentiment.unknown': 0.1, 'sentiment.negative': 0.2, ...}
    """
    if mode is ChartMode.TWEET_COUNT:
        return {"tweetCount": row.tweet_count}

    ratio = row.sentiment if mode is ChartMode.SENTIMENT else row.sentiment_by_followers
    return {key: getattr(ratio, key.split(".", 1)[1]) for key in mode.series_keys}
