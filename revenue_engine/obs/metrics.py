"""Prometheus metrics for report fetching, polling and exports."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

FETCH_COUNTER = Counter(
    "revenue_fetch_total",
    "Total number of revenue report fetches.",
    labelnames=("mode", "outcome"),
)
FETCH_LATENCY_SECONDS = Histogram(
    "revenue_fetch_latency_seconds",
    "Latency of revenue report fetches in seconds.",
    labelnames=("mode",),
)
SILENT_FAILURE_STREAK_GAUGE = Gauge(
    "revenue_silent_failure_streak",
    "Consecutive failed background polls since the last successful fetch.",
)
EXPORT_COUNTER = Counter(
    "revenue_export_total",
    "Total number of report exports by format and outcome.",
    labelnames=("format", "outcome"),
)


def record_fetch(mode: str, outcome: str, latency: float | None = None) -> None:
    FETCH_COUNTER.labels(mode=mode, outcome=outcome).inc()
    if latency is not None:
        FETCH_LATENCY_SECONDS.labels(mode=mode).observe(latency)


def report_failure_streak(streak: int) -> None:
    """Report the current streak of consecutive silent poll failures."""
    SILENT_FAILURE_STREAK_GAUGE.set(max(0, streak))


def record_export(fmt: str, outcome: str) -> None:
    EXPORT_COUNTER.labels(format=fmt, outcome=outcome).inc()


__all__ = [
    "EXPORT_COUNTER",
    "FETCH_COUNTER",
    "FETCH_LATENCY_SECONDS",
    "SILENT_FAILURE_STREAK_GAUGE",
    "record_export",
    "record_fetch",
    "report_failure_streak",
]
