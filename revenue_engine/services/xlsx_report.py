"""Spreadsheet (XLSX) report formatter.

openpyxl is resolved through an injected loader the first time a workbook is
built, so the aggregation and CSV paths never import it.
"""
from __future__ import annotations

import importlib
import io
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from types import ModuleType
from typing import Any

from revenue_engine.core.config import Settings, get_settings
from revenue_engine.core.errors import ExportError
from revenue_engine.schemas.filters import FilterState
from revenue_engine.schemas.report import ReportSnapshot, quantize_amount
from revenue_engine.services.report_sections import Cell, ReportSection, build_sections, metadata_rows

logger = logging.getLogger(__name__)

BANNER_SUBTITLE = "Revenue Dashboard Export"
SHEET_ORDER = (
    "Metadata",
    "Summary",
    "By Category",
    "Subscriptions",
    "Coordinator Event Fees",
    "Athlete Event Fees",
    "Event-wise",
    "Premium Members",
    "Top Spenders",
    "Transactions",
)
MONEY_FORMAT = "#,##0.00"
HEADER_COLOR = "366092"

WorkbookLoader = Callable[[], ModuleType]


def load_openpyxl() -> ModuleType:
    return importlib.import_module("openpyxl")


def cell_value(value: Cell) -> Any:
    """Spreadsheet value for a section cell; currency becomes a 2-decimal float."""
    if isinstance(value, Decimal):
        return float(quantize_amount(value))
    return value


def _write_cell(ws: Any, row: int, column: int, value: Cell) -> Any:
    cell = ws.cell(row=row, column=column, value=cell_value(value))
    if isinstance(value, str):
        # text starting with "=" must stay text, never a formula
        cell.data_type = "s"
    return cell


class XlsxReportFormatter:
    """Serializes a snapshot into a ten-sheet workbook."""

    def __init__(self, settings: Settings | None = None, *, loader: WorkbookLoader | None = None) -> None:
        self._settings = settings or get_settings()
        self._loader = loader or load_openpyxl
        self._openpyxl: ModuleType | None = None

    def _library(self) -> ModuleType:
        if self._openpyxl is None:
            try:
                self._openpyxl = self._loader()
            except ImportError as exc:
                raise ExportError(f"spreadsheet support unavailable: {exc}", fmt="xlsx") from exc
            except Exception as exc:
                logger.error("Excel export failed to load openpyxl: %s", exc)
                raise ExportError(f"spreadsheet support failed to load: {exc}", fmt="xlsx") from exc
        return self._openpyxl

    def build(
        self,
        snapshot: ReportSnapshot,
        filters: FilterState,
        *,
        generated_at: datetime | None = None,
    ) -> bytes:
        openpyxl = self._library()
        generated = generated_at or datetime.now(timezone.utc)
        metadata = metadata_rows(snapshot, filters, settings=self._settings, generated_at=generated)
        sections = build_sections(snapshot, settings=self._settings)

        try:
            workbook = openpyxl.Workbook()
            workbook.remove(workbook.active)
            index = ReportSection(
                key="metadata",
                title="METADATA",
                sheet_name="Metadata",
                headers=("Sheet", "Rows"),
                rows=tuple((section.sheet_name, len(section.rows)) for section in sections),
                column_widths=(28, 40),
            )
            for section in [index, *sections]:
                self._write_sheet(openpyxl, workbook, section, metadata)

            output = io.BytesIO()
            workbook.save(output)
            return output.getvalue()
        except Exception as exc:
            logger.error("Excel export failed: %s", exc)
            raise ExportError(f"could not build workbook: {exc}", fmt="xlsx") from exc

    def _write_sheet(
        self,
        openpyxl: ModuleType,
        workbook: Any,
        section: ReportSection,
        metadata: tuple[tuple[str, str], ...],
    ) -> None:
        styles = openpyxl.styles
        get_column_letter = openpyxl.utils.get_column_letter

        ws = workbook.create_sheet(title=section.sheet_name)
        last_column = get_column_letter(max(len(section.headers), 2))

        banner_font = styles.Font(bold=True, size=14)
        banner_alignment = styles.Alignment(horizontal="center", vertical="center")
        for row, text in ((1, self._settings.product_name), (2, BANNER_SUBTITLE)):
            ws.merge_cells(f"A{row}:{last_column}{row}")
            ws[f"A{row}"] = text
            ws[f"A{row}"].font = banner_font if row == 1 else styles.Font(bold=True, size=12)
            ws[f"A{row}"].alignment = banner_alignment

        row = 4
        for label, value in metadata:
            ws.cell(row=row, column=1, value=label).font = styles.Font(bold=True)
            _write_cell(ws, row, 2, value)
            row += 1
        row += 1

        header_font = styles.Font(bold=True, color="FFFFFF")
        header_fill = styles.PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid")
        header_alignment = styles.Alignment(horizontal="center", vertical="center")
        for col, header in enumerate(section.headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment
        row += 1

        for values in section.rows:
            for col, value in enumerate(values, 1):
                cell = _write_cell(ws, row, col, value)
                if isinstance(value, Decimal):
                    cell.number_format = MONEY_FORMAT
            row += 1

        for col, width in enumerate(section.column_widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width


__all__ = [
    "BANNER_SUBTITLE",
    "SHEET_ORDER",
    "XlsxReportFormatter",
    "cell_value",
    "load_openpyxl",
]
