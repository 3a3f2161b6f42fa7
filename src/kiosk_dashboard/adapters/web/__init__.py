"""Web adapters exposing the dashboard API."""

from kiosk_dashboard.adapters.web.app import create_app
from kiosk_dashboard.adapters.web.web_adapter import DashboardWebAdapter

__all__ = ["DashboardWebAdapter", "create_app"]
