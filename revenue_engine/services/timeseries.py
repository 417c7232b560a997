"""Time-series chart geometry, tooltips and click-to-pin drilldown."""
from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from revenue_engine.schemas.report import DailyPoint


class ChartMode(str, enum.Enum):
    BAR = "bar"
    LINE = "line"


@dataclass(slots=True, frozen=True)
class ChartPoint:
    index: int
    x: float
    y: float
    point: DailyPoint
    show_label: bool

    @property
    def height(self) -> float:
        return 1.0 - self.y


@dataclass(slots=True, frozen=True)
class Bar:
    x: float
    width: float
    height: float
    point: DailyPoint


@dataclass(slots=True, frozen=True)
class TooltipAnchor:
    x_percent: float
    y_percent: float
    point: DailyPoint


@dataclass(slots=True, frozen=True)
class TimeSeriesChart:
    """Normalized chart coordinates in the unit square, y growing downwards."""

    mode: ChartMode
    points: tuple[ChartPoint, ...]
    max_revenue: Decimal

    def __len__(self) -> int:
        return len(self.points)

    def line_path(self) -> list[tuple[float, float]]:
        return [(point.x, point.y) for point in self.points]

    def bars(self) -> list[Bar]:
        if not self.points:
            return []
        width = 1.0 / len(self.points)
        return [Bar(x=point.x, width=width, height=point.height, point=point.point) for point in self.points]

    def labels(self) -> list[tuple[int, str]]:
        return [(point.index, point.point.label or point.point.date) for point in self.points if point.show_label]

    def find(self, date: str) -> ChartPoint | None:
        return next((point for point in self.points if point.point.date == date), None)


def label_indices(count: int) -> set[int]:
    """Indices that get an axis label: first, quartiles, middle and last."""
    if count <= 0:
        return set()
    return {0, count // 4, count // 2, (3 * count) // 4, count - 1}


def build_chart(points: Sequence[DailyPoint], mode: ChartMode | str = ChartMode.BAR) -> TimeSeriesChart:
    count = len(points)
    max_revenue = max((point.revenue for point in points), default=Decimal("0"))
    y_scale = float(max(max_revenue, Decimal("1")))
    x_scale = float(max(count - 1, 1))
    visible = label_indices(count)
    chart_points = tuple(
        ChartPoint(
            index=index,
            x=index / x_scale,
            y=1.0 - float(point.revenue) / y_scale,
            point=point,
            show_label=index in visible,
        )
        for index, point in enumerate(points)
    )
    return TimeSeriesChart(mode=ChartMode(mode), points=chart_points, max_revenue=max_revenue)


def hover(chart: TimeSeriesChart, index: int) -> TooltipAnchor | None:
    if index < 0 or index >= len(chart.points):
        return None
    point = chart.points[index]
    return TooltipAnchor(x_percent=point.x * 100, y_percent=point.y * 100, point=point.point)


def toggle_pin(pinned_date: str | None, point: DailyPoint) -> str | None:
    """Pin ``point``; clicking the already-pinned date clears the pin."""
    if pinned_date is not None and pinned_date == point.date:
        return None
    return point.date


def pinned_point(chart: TimeSeriesChart, pinned_date: str | None) -> DailyPoint | None:
    if pinned_date is None:
        return None
    match = chart.find(pinned_date)
    return match.point if match else None


__all__ = [
    "Bar",
    "ChartMode",
    "ChartPoint",
    "TimeSeriesChart",
    "TooltipAnchor",
    "build_chart",
    "hover",
    "label_indices",
    "pinned_point",
    "toggle_pin",
]
