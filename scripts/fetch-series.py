#!/usr/bin/env python3
"""
Run one sentiment fetch cycle and print a summary.

Useful for checking that API_URL answers and paginates correctly before
pointing a dashboard at it.

Usage:
    API_URL=https://api.example.com/trends python scripts/fetch-series.py

    With a different window or chart mode:
    python scripts/fetch-series.py --duration 1d --mode sentimentByFollowers

Environment Variables:
    See src/tracker/config.py for the full list. API_URL is required.

Exit codes:
    0 - series fetched
    1 - configuration error
    2 - fetch failed (network, decode or stalled pagination)
"""

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

# Make `src` importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.lib.feed import DURATION_OPTIONS, ChartMode, series_values  # noqa: E402
from src.tracker.config import ConfigurationError, get_config  # noqa: E402
from src.tracker.state import LoadStatus, SentimentTracker  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _fmt(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=UTC).strftime("%Y-%m-%d %H:%M")


def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch a sentiment series")
    parser.add_argument("--duration", choices=DURATION_OPTIONS, default=None)
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ChartMode],
        default=ChartMode.SENTIMENT.value,
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = get_config()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    tracker = SentimentTracker(config)
    tracker.set_chart_mode(args.mode)
    snapshot = tracker.set_duration(args.duration) if args.duration else tracker.load()

    if snapshot.status is LoadStatus.ERROR:
        logger.error(f"Fetch failed ({snapshot.error_kind}): {snapshot.error}")
        return 2

    window = snapshot.window
    print(f"{config.asset_id}: {_fmt(window.start_ms)} to {_fmt(window.end_ms)} UTC")
    print(f"{len(snapshot.rows)} samples")

    latest = tracker.selected_row()
    if latest is not None:
        print(f"latest {_fmt(latest.time_ms)}  usd={latest.usd_rate}")
        for key, value in series_values(latest, tracker.chart_mode).items():
            print(f"  {key:<32} {value}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
