"""Delimited-text (CSV) report formatter."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal

from revenue_engine.core.config import Settings, get_settings
from revenue_engine.schemas.filters import FilterState
from revenue_engine.schemas.report import ReportSnapshot, quantize_amount
from revenue_engine.services.report_sections import Cell, build_sections, metadata_rows

logger = logging.getLogger(__name__)

CRLF = "\r\n"
BYTE_ORDER_MARK = "\ufeff"
SEPARATOR_HINT = "sep=,"


def escape_field(value: object) -> str:
    """Quote a field iff it holds a comma, quote, newline or surrounding whitespace."""

    text = "" if value is None else str(value)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    needs_quotes = any(char in text for char in (",", '"', "\n")) or text != text.strip()
    if needs_quotes:
        return '"' + text.replace('"', '""') + '"'
    return text


def format_amount(value: Decimal | float | int | None) -> str:
    return f"{quantize_amount(value):.2f}"


def format_cell(value: Cell) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, Decimal):
        return format_amount(value)
    if isinstance(value, int):
        return str(value)
    return escape_field(value)


def format_row(cells: Iterable[Cell]) -> str:
    return ",".join(format_cell(cell) for cell in cells)


class CsvReportFormatter:
    """Serializes a snapshot into one CRLF-terminated text blob."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def render(
        self,
        snapshot: ReportSnapshot,
        filters: FilterState,
        *,
        generated_at: datetime | None = None,
    ) -> str:
        generated = generated_at or datetime.now(timezone.utc)
        lines: list[str] = [
            SEPARATOR_HINT,
            escape_field(f"{self._settings.product_name} Revenue Report"),
            "",
            "METADATA",
        ]
        lines.extend(
            format_row(row)
            for row in metadata_rows(snapshot, filters, settings=self._settings, generated_at=generated)
        )

        for section in build_sections(snapshot, settings=self._settings):
            if section.optional and not section.rows:
                continue
            lines.append("")
            lines.append(section.title)
            lines.append(format_row(section.headers))
            lines.extend(format_row(row) for row in section.rows)

        return CRLF.join(lines) + CRLF

    def build(
        self,
        snapshot: ReportSnapshot,
        filters: FilterState,
        *,
        generated_at: datetime | None = None,
    ) -> bytes:
        """Render and encode as UTF-8 prefixed with a byte-order mark."""

        text = self.render(snapshot, filters, generated_at=generated_at)
        logger.debug("rendered csv report (%d characters)", len(text))
        return (BYTE_ORDER_MARK + text).encode("utf-8")


__all__ = [
    "BYTE_ORDER_MARK",
    "CRLF",
    "CsvReportFormatter",
    "escape_field",
    "format_amount",
    "format_row",
]
