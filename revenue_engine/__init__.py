"""Revenue reporting and export engine for the admin dashboard."""

from .services.dashboard import RevenueDashboard

__all__ = ["RevenueDashboard"]
