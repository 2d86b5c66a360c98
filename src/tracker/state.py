"""Tracker state for the sentiment chart.

Owns the window parameters (duration, reference instant), the response
cache and the current fetch cycle, and publishes immutable snapshots for
the presentation layer to render.

Fetch cycles are tagged with a generation number. Changing the duration
or refreshing starts a new generation; a slower, older cycle that
finishes afterwards is discarded instead of overwriting newer state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from src.lib.feed import (
    DURATION_OPTIONS,
    ChartMode,
    ChartRow,
    FeedError,
    InvalidDurationCode,
    PaginatedFetcher,
    ResponseCache,
    Window,
    compute_window,
    now_ms,
    transform,
)
from src.lib.logging_utils import get_safe_error_info, log_expected_warning
from src.tracker.config import TrackerConfig

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    """Lifecycle of one fetch cycle as seen by the presentation layer."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class TrackerSnapshot:
    """Immutable view of tracker state handed to the presentation layer."""

    generation: int
    status: LoadStatus
    duration: str
    window: Window | None = None
    rows: tuple[ChartRow, ...] = ()
    error: str | None = None
    error_kind: str | None = None


class SentimentTracker:
    """Drives fetch cycles for one asset and holds the latest snapshot.

    Attributes:
        config: Tracker configuration.
        cache: Response cache owned by this tracker.
        fetcher: Paginated fetcher bound to the cache.
        asset_id: Asset being tracked.
        chart_mode: Metric family the chart stacks.

    Example:
        tracker = SentimentTracker(get_config())
        snapshot = tracker.load()
        if snapshot.status is LoadStatus.READY:
            render(snapshot.rows, tracker.series_keys)
    """

    def __init__(
        self,
        config: TrackerConfig,
        *,
        fetcher: PaginatedFetcher | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize tracker.

        Args:
            config: Tracker configuration.
            fetcher: Fetcher to use. Built from config when omitted, with a
                     cache owned by this tracker.
            clock: Returns the current time in epoch milliseconds.
        """
        self.config = config
        if fetcher is None:
            fetcher = PaginatedFetcher(
                config.api_url,
                cache=ResponseCache(max_entries=config.cache_max_entries),
                timeout_seconds=config.request_timeout_seconds,
                max_pages=config.max_pages,
                retry_attempts=config.retry_attempts,
            )
        self.fetcher = fetcher
        self.cache = fetcher.cache
        self.asset_id = config.asset_id
        self.chart_mode = ChartMode.SENTIMENT

        self._clock = clock
        self._lock = threading.Lock()
        self._duration = config.default_duration
        self._reference_ms = clock()
        self._selected_time_ms: int | None = None
        self._generation = 0
        self._snapshot = TrackerSnapshot(
            generation=0, status=LoadStatus.IDLE, duration=self._duration
        )

    @property
    def duration(self) -> str:
        return self._duration

    @property
    def reference_ms(self) -> int:
        return self._reference_ms

    @property
    def snapshot(self) -> TrackerSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def window(self) -> Window:
        """Window for the current duration and reference instant."""
        with self._lock:
            duration, reference_ms = self._duration, self._reference_ms
        return compute_window(duration, reference_ms)

    @property
    def series_keys(self) -> tuple[str, ...]:
        return self.chart_mode.series_keys

    @property
    def selected_time_ms(self) -> int | None:
        return self._selected_time_ms

    def load(self) -> TrackerSnapshot:
        """Run one fetch cycle for the current window.

        Returns:
            The current snapshot after the cycle. If a newer cycle started
            while this one was fetching, that cycle's snapshot is returned
            and this cycle's result is dropped.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            duration = self._duration
            reference_ms = self._reference_ms

        window = compute_window(duration, reference_ms)
        self._publish(
            TrackerSnapshot(
                generation=generation,
                status=LoadStatus.LOADING,
                duration=duration,
                window=window,
            )
        )

        try:
            samples = self.fetcher.fetch_all(
                self.asset_id, window.start_ms, window.end_ms
            )
            rows = tuple(transform(samples))
        except FeedError as e:
            log_expected_warning(
                logger,
                "Fetch cycle failed",
                extra={
                    "generation": generation,
                    "error_code": e.error_code.value,
                    **get_safe_error_info(e),
                },
            )
            # Fail closed: rows from earlier cycles are not kept
            self._publish(
                TrackerSnapshot(
                    generation=generation,
                    status=LoadStatus.ERROR,
                    duration=duration,
                    window=window,
                    error=str(e),
                    error_kind=type(e).__name__,
                )
            )
        else:
            self._publish(
                TrackerSnapshot(
                    generation=generation,
                    status=LoadStatus.READY,
                    duration=duration,
                    window=window,
                    rows=rows,
                )
            )

        return self.snapshot

    def set_duration(self, duration: str) -> TrackerSnapshot:
        """Switch the window duration and reload.

        Raises:
            InvalidDurationCode: If duration is not one of DURATION_OPTIONS
        """
        if duration not in DURATION_OPTIONS:
            raise InvalidDurationCode(duration)
        with self._lock:
            self._duration = duration
        return self.load()

    def refresh(self) -> TrackerSnapshot:
        """Drop every cached response, move the window to now and reload."""
        self.cache.clear()
        with self._lock:
            self._reference_ms = self._clock()
            reference_ms = self._reference_ms
            duration = self._duration
        logger.info(
            "Manual refresh",
            extra={"reference_ms": reference_ms, "duration": duration},
        )
        return self.load()

    def select(self, time_ms: int | None) -> None:
        """Highlight a timestamp on the chart. Never triggers a fetch."""
        with self._lock:
            self._selected_time_ms = time_ms

    def selected_row(self) -> ChartRow | None:
        """Row under the highlight, or the latest row when none is selected."""
        with self._lock:
            rows = self._snapshot.rows
            selected = self._selected_time_ms
        if not rows:
            return None
        if selected is None:
            return rows[-1]
        return next((row for row in rows if row.time_ms == selected), None)

    def set_chart_mode(self, mode: ChartMode | str) -> None:
        chart_mode = ChartMode(mode)
        with self._lock:
            self.chart_mode = chart_mode

    def _publish(self, snapshot: TrackerSnapshot) -> bool:
        """Store snapshot unless a newer generation has started."""
        with self._lock:
            if snapshot.generation != self._generation:
                logger.debug(
                    "Discarding stale fetch cycle",
                    extra={
                        "generation": snapshot.generation,
                        "current_generation": self._generation,
                        "status": snapshot.status.value,
                    },
                )
                return False
            self._snapshot = snapshot
            return True
