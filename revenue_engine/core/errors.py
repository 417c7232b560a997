"""Error taxonomy for the revenue reporting engine."""
from __future__ import annotations


class RevenueReportError(RuntimeError):
    """Base exception for revenue reporting errors."""


class FetchError(RevenueReportError):
    """Raised when the reporting API fails or returns a malformed document."""

    def __init__(self, message: str, *, status_code: int | None = None, silent: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.silent = silent


class ValidationError(RevenueReportError):
    """Raised when a filter combination is rejected before dispatch."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ExportError(RevenueReportError):
    """Raised when a report file could not be produced."""

    def __init__(self, message: str, *, fmt: str) -> None:
        super().__init__(message)
        self.fmt = fmt


__all__ = ["ExportError", "FetchError", "RevenueReportError", "ValidationError"]
