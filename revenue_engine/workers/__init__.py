"""Background workers for the reporting engine."""

from .polling import RevenuePoller, next_tick

__all__ = ["RevenuePoller", "next_tick"]
