"""Domain models for the kiosk dashboard."""

from kiosk_dashboard.domain.models.alert import Alert
from kiosk_dashboard.domain.models.cache_entry import CacheEntry
from kiosk_dashboard.domain.models.dashboard_snapshot import DashboardSnapshot
from kiosk_dashboard.domain.models.data_source import DataSource
from kiosk_dashboard.domain.models.playback_state import PlaybackDevice, PlaybackState, Track
from kiosk_dashboard.domain.models.rate_limit_policy import RateLimitPolicy
from kiosk_dashboard.domain.models.source_configuration import (
    BikeStationConfiguration,
    TransitStopConfiguration,
)
from kiosk_dashboard.domain.models.source_health import HealthStatus, SourceHealth
from kiosk_dashboard.domain.models.station_snapshot import StationSnapshot
from kiosk_dashboard.domain.models.stop_prediction import INBOUND, OUTBOUND, StopPrediction
from kiosk_dashboard.domain.models.stop_snapshot import StopSnapshot
from kiosk_dashboard.domain.models.weather_snapshot import HourlyPrecipitation, WeatherSnapshot

__all__ = [
    "INBOUND",
    "OUTBOUND",
    "Alert",
    "BikeStationConfiguration",
    "CacheEntry",
    "DashboardSnapshot",
    "DataSource",
    "HealthStatus",
    "HourlyPrecipitation",
    "PlaybackDevice",
    "PlaybackState",
    "RateLimitPolicy",
    "SourceHealth",
    "StationSnapshot",
    "StopPrediction",
    "StopSnapshot",
    "Track",
    "TransitStopConfiguration",
    "WeatherSnapshot",
]
