"""Export dispatcher: terminal file-save actions over the displayed snapshot."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path

from revenue_engine.core.config import Settings, get_settings
from revenue_engine.core.errors import ExportError
from revenue_engine.obs import record_export, report_span
from revenue_engine.schemas.filters import FilterState
from revenue_engine.services.csv_report import CsvReportFormatter
from revenue_engine.services.fetcher import DisplayedReport
from revenue_engine.services.xlsx_report import XlsxReportFormatter

logger = logging.getLogger(__name__)

FileWriter = Callable[[Path, bytes], None]


def report_filename(prefix: str, extension: str, day: date) -> str:
    return f"{prefix}-Revenue-Report-{day.isoformat()}.{extension}"


def _write_file(path: Path, payload: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)


@dataclass(slots=True, frozen=True)
class ExportResult:
    path: Path
    fmt: str
    size: int


class ExportDispatcher:
    """Writes the on-screen report to disk; application state is never touched."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        csv_formatter: CsvReportFormatter | None = None,
        xlsx_formatter: XlsxReportFormatter | None = None,
        writer: FileWriter | None = None,
        now_fn: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._csv = csv_formatter or CsvReportFormatter(self._settings)
        self._xlsx = xlsx_formatter or XlsxReportFormatter(self._settings)
        self._writer = writer or _write_file
        self._now = now_fn or (lambda: datetime.now(timezone.utc))

    def export_csv(self, displayed: DisplayedReport | None) -> ExportResult:
        return self._export("csv", displayed)

    def export_xlsx(self, displayed: DisplayedReport | None) -> ExportResult:
        return self._export("xlsx", displayed)

    async def export_xlsx_async(self, displayed: DisplayedReport | None) -> ExportResult:
        """Build the workbook off the event loop."""
        return await asyncio.to_thread(self._export, "xlsx", displayed)

    def _export(self, fmt: str, displayed: DisplayedReport | None) -> ExportResult:
        if displayed is None:
            record_export(fmt, "error")
            raise ExportError("no report is loaded", fmt=fmt)

        generated_at = self._now()
        filters = displayed.filters or FilterState(date_range=displayed.descriptor.date_range)
        formatter = self._csv if fmt == "csv" else self._xlsx
        path = Path(self._settings.export_dir) / report_filename(
            self._settings.product_prefix, fmt, generated_at.date()
        )

        with report_span("revenue.export", format=fmt, sequence=displayed.sequence):
            try:
                payload = formatter.build(displayed.snapshot, filters, generated_at=generated_at)
                self._writer(path, payload)
            except ExportError:
                record_export(fmt, "error")
                raise
            except OSError as exc:
                record_export(fmt, "error")
                raise ExportError(f"could not write {path.name}: {exc}", fmt=fmt) from exc

        record_export(fmt, "ok")
        logger.info("exported %s report to %s (%d bytes)", fmt, path, len(payload))
        return ExportResult(path=path, fmt=fmt, size=len(payload))


__all__ = ["ExportDispatcher", "ExportResult", "report_filename"]
