"""Shared observability setup for embedding the reporting engine."""

from __future__ import annotations

from revenue_engine.core.config import Settings, get_settings
from revenue_engine.core.logging import configure_logging
from revenue_engine.obs import initialise_tracing, report_failure_streak


def configure_engine(service_name: str = "revenue-dashboard", *, settings: Settings | None = None) -> None:
    """Configure logging and tracing and zero the poll metrics for a dashboard process."""

    settings = settings or get_settings()
    configure_logging(settings.log_config_path, level=settings.log_level)
    if settings.enable_tracing:
        initialise_tracing(service_name=service_name, endpoint=settings.otel_exporter_endpoint)
    if settings.enable_metrics:
        report_failure_streak(0)


__all__ = ["configure_engine"]
