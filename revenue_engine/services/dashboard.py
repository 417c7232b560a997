"""Revenue dashboard controller wiring filters, fetching, polling and exports."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from revenue_engine.core.config import Settings, get_settings
from revenue_engine.core.errors import FetchError
from revenue_engine.schemas.filters import ChipKey, FilterChip, FilterState
from revenue_engine.schemas.report import DailyPoint
from revenue_engine.services.exports import ExportDispatcher, ExportResult
from revenue_engine.services.fetcher import AggregationFetcher, DisplayedReport, FetchOutcome
from revenue_engine.services.filters import active_chips, clear_chip, compose_descriptor, transition
from revenue_engine.services.timeseries import (
    ChartMode,
    TimeSeriesChart,
    TooltipAnchor,
    build_chart,
    hover,
    pinned_point,
    toggle_pin,
)
from revenue_engine.workers.polling import RevenuePoller

logger = logging.getLogger(__name__)


class RevenueDashboard:
    """State holder behind the admin revenue view.

    Applied filters live in one immutable ``FilterState``; every applied
    change dispatches exactly one fetch. Rendering and exports read the
    fetcher's current ``DisplayedReport`` reference only.
    """

    def __init__(
        self,
        fetcher: AggregationFetcher,
        *,
        settings: Settings | None = None,
        dispatcher: ExportDispatcher | None = None,
        poller: RevenuePoller | None = None,
        auto_refresh: bool = True,
    ) -> None:
        self._settings = settings or get_settings()
        self._fetcher = fetcher
        self._dispatcher = dispatcher or ExportDispatcher(self._settings)
        self._poller = poller or RevenuePoller(
            self.poll_once, interval=self._settings.poll_interval_seconds
        )
        self._filters = FilterState(date_range=self._settings.default_date_range)
        self._auto_refresh = auto_refresh
        self._mounted = False
        self.chart_mode = ChartMode.BAR
        self.pinned_date: str | None = None
        self.tooltip: TooltipAnchor | None = None

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def displayed(self) -> DisplayedReport | None:
        return self._fetcher.current

    @property
    def error(self) -> FetchError | None:
        return self._fetcher.last_error

    @property
    def auto_refresh(self) -> bool:
        return self._auto_refresh

    @property
    def polling(self) -> bool:
        return self._poller.running

    def chips(self) -> list[FilterChip]:
        return active_chips(self._filters, currency_symbol=self._settings.currency_symbol)

    def refresh(self, *, silent: bool = False) -> FetchOutcome:
        descriptor = compose_descriptor(self._filters)
        return self._fetcher.fetch(descriptor, silent=silent, filters=self._filters)

    def poll_once(self) -> FetchOutcome:
        return self.refresh(silent=True)

    def apply_filters(self, state: FilterState | None = None, **changes: Any) -> FetchOutcome:
        """Commit a new filter combination and fetch it.

        Raises ``ValidationError`` before any request when the combination is
        invalid; the previously applied filters stay in place.
        """

        candidate = transition(state or self._filters, **changes)
        descriptor = compose_descriptor(candidate)
        self._filters = candidate
        return self._fetcher.fetch(descriptor, silent=False, filters=candidate)

    def set_date_range(self, date_range: str | int) -> FetchOutcome:
        return self.apply_filters(date_range=date_range)

    def remove_chip(self, key: ChipKey | str) -> FetchOutcome:
        return self.apply_filters(clear_chip(self._filters, key))

    async def mount(self) -> FetchOutcome:
        self._mounted = True
        outcome = await asyncio.to_thread(self.refresh)
        if self._auto_refresh:
            self._poller.start()
        return outcome

    async def unmount(self) -> None:
        self._mounted = False
        await self._poller.stop()

    async def set_auto_refresh(self, enabled: bool) -> FetchOutcome:
        self._auto_refresh = enabled
        if not enabled:
            await self._poller.stop()
        elif self._mounted:
            self._poller.start()
        return await asyncio.to_thread(self.refresh)

    def chart(self) -> TimeSeriesChart:
        displayed = self.displayed
        points = displayed.snapshot.daily_revenue if displayed else ()
        return build_chart(points, self.chart_mode)

    def set_chart_mode(self, mode: ChartMode | str) -> None:
        self.chart_mode = ChartMode(mode)

    def hover(self, index: int | None) -> TooltipAnchor | None:
        self.tooltip = None if index is None else hover(self.chart(), index)
        return self.tooltip

    def click(self, point: DailyPoint) -> str | None:
        self.pinned_date = toggle_pin(self.pinned_date, point)
        return self.pinned_date

    def drilldown(self) -> DailyPoint | None:
        return pinned_point(self.chart(), self.pinned_date)

    def export_csv(self) -> ExportResult:
        return self._dispatcher.export_csv(self.displayed)

    def export_xlsx(self) -> ExportResult:
        return self._dispatcher.export_xlsx(self.displayed)


__all__ = ["RevenueDashboard"]
