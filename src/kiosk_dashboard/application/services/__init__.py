"""Application services."""

from kiosk_dashboard.application.services.cached_source import CachedSource
from kiosk_dashboard.application.services.dashboard_service import DashboardService
from kiosk_dashboard.application.services.transit_merge import merge_stop_predictions

__all__ = ["CachedSource", "DashboardService", "merge_stop_predictions"]
