"""Aggregation fetcher: sequenced requests and atomic snapshot swaps."""
from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock

from revenue_engine.core.config import Settings, get_settings
from revenue_engine.core.errors import FetchError
from revenue_engine.obs import record_fetch, report_failure_streak, report_span
from revenue_engine.schemas.filters import FilterState, QueryDescriptor
from revenue_engine.schemas.report import ReportSnapshot
from revenue_engine.services.aggregation import check_consistency
from revenue_engine.services.reporting_client import ReportingApiClient

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DisplayedReport:
    """The snapshot currently on screen, with the request that produced it."""

    snapshot: ReportSnapshot
    descriptor: QueryDescriptor
    filters: FilterState | None
    sequence: int
    fetched_at: datetime


@dataclass(slots=True, frozen=True)
class FetchOutcome:
    """Result of one ``fetch`` call."""

    sequence: int
    applied: bool
    error: FetchError | None = None
    user_visible: bool = False

    @property
    def discarded(self) -> bool:
        return not self.applied and self.error is None


class AggregationFetcher:
    """Issues one request per descriptor and applies only the newest responses.

    Each request takes a monotonically increasing sequence number. A response
    is applied only when its sequence is at least that of the last applied
    response, so a late answer for a superseded filter is dropped.
    """

    def __init__(
        self,
        client: ReportingApiClient,
        *,
        settings: Settings | None = None,
        now_fn: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or get_settings()
        self._now = now_fn or (lambda: datetime.now(timezone.utc))
        self._sequence = itertools.count(1)
        self._lock = Lock()
        self._current: DisplayedReport | None = None
        self._last_applied_sequence = 0
        self._silent_failures = 0
        self._last_error: FetchError | None = None
        self._listeners: list[Callable[[DisplayedReport], None]] = []

    @property
    def current(self) -> DisplayedReport | None:
        return self._current

    @property
    def last_error(self) -> FetchError | None:
        """The failure to surface to the user, if any."""
        return self._last_error

    @property
    def silent_failure_streak(self) -> int:
        return self._silent_failures

    @property
    def last_applied_sequence(self) -> int:
        return self._last_applied_sequence

    def subscribe(self, listener: Callable[[DisplayedReport], None]) -> None:
        self._listeners.append(listener)

    def next_sequence(self) -> int:
        with self._lock:
            return next(self._sequence)

    def fetch(
        self,
        descriptor: QueryDescriptor,
        *,
        silent: bool = False,
        filters: FilterState | None = None,
    ) -> FetchOutcome:
        sequence = self.next_sequence()
        mode = "silent" if silent else "manual"
        started = time.perf_counter()
        with report_span("revenue.fetch", sequence=sequence, silent=silent, date_range=descriptor.date_range):
            try:
                snapshot = self._client.fetch_snapshot(
                    descriptor, timeout=self._settings.reporting_api_timeout_seconds
                )
            except FetchError as exc:
                record_fetch(mode, "error", time.perf_counter() - started)
                return self.apply_failure(sequence, exc, silent=silent)
        record_fetch(mode, "ok", time.perf_counter() - started)
        return self.apply(sequence, snapshot, descriptor, filters=filters)

    def apply(
        self,
        sequence: int,
        snapshot: ReportSnapshot,
        descriptor: QueryDescriptor,
        *,
        filters: FilterState | None = None,
    ) -> FetchOutcome:
        """Swap in ``snapshot`` unless a newer response has already been applied."""

        for issue in check_consistency(snapshot):
            logger.warning("inconsistent snapshot (sequence %s): %s", sequence, issue)

        with self._lock:
            if sequence < self._last_applied_sequence:
                logger.debug(
                    "discarding stale response %s; %s already applied",
                    sequence,
                    self._last_applied_sequence,
                )
                return FetchOutcome(sequence=sequence, applied=False)
            displayed = DisplayedReport(
                snapshot=snapshot,
                descriptor=descriptor,
                filters=filters,
                sequence=sequence,
                fetched_at=self._now(),
            )
            self._current = displayed
            self._last_applied_sequence = sequence
            self._silent_failures = 0
            self._last_error = None
            listeners = list(self._listeners)

        report_failure_streak(0)
        for listener in listeners:
            listener(displayed)
        return FetchOutcome(sequence=sequence, applied=True)

    def apply_failure(self, sequence: int, error: FetchError, *, silent: bool) -> FetchOutcome:
        """Record a failed request; the displayed snapshot is never cleared.

        A silent failure becomes user-visible once the consecutive streak
        reaches ``silent_failure_threshold`` (the threshold is inclusive).
        """

        error.silent = silent
        with self._lock:
            if sequence < self._last_applied_sequence:
                logger.debug("ignoring failure of superseded request %s: %s", sequence, error)
                return FetchOutcome(sequence=sequence, applied=False)
            if not silent:
                logger.error("revenue report fetch failed: %s", error)
                self._last_error = error
                return FetchOutcome(sequence=sequence, applied=False, error=error, user_visible=True)

            self._silent_failures += 1
            streak = self._silent_failures
            visible = streak >= self._settings.silent_failure_threshold
            if visible:
                self._last_error = error

        report_failure_streak(streak)
        logger.warning("background refresh failed (%s consecutive): %s", streak, error)
        return FetchOutcome(sequence=sequence, applied=False, error=error, user_visible=visible)


__all__ = ["AggregationFetcher", "DisplayedReport", "FetchOutcome"]
