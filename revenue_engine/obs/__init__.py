"""Observability utilities."""

from .metrics import (
    EXPORT_COUNTER,
    FETCH_COUNTER,
    FETCH_LATENCY_SECONDS,
    SILENT_FAILURE_STREAK_GAUGE,
    record_export,
    record_fetch,
    report_failure_streak,
)
from .tracing import initialise_tracing, report_span

__all__ = [
    "EXPORT_COUNTER",
    "FETCH_COUNTER",
    "FETCH_LATENCY_SECONDS",
    "SILENT_FAILURE_STREAK_GAUGE",
    "initialise_tracing",
    "record_export",
    "record_fetch",
    "report_failure_streak",
    "report_span",
]
