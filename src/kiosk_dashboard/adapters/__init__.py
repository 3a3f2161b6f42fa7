"""Adapters layer - external system integrations."""

from kiosk_dashboard.adapters.bluebikes_api import BikeshareService
from kiosk_dashboard.adapters.config import AppConfig
from kiosk_dashboard.adapters.mbta_api import TransitAlertsService, TransitService
from kiosk_dashboard.adapters.openweather_api import WeatherService
from kiosk_dashboard.adapters.spotify_api import SpotifyService, SpotifySession

__all__ = [
    "AppConfig",
    "BikeshareService",
    "SpotifyService",
    "SpotifySession",
    "TransitAlertsService",
    "TransitService",
    "WeatherService",
]
