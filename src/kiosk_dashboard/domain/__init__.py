"""Domain layer - models, contracts and errors."""

from kiosk_dashboard.domain.models import (
    Alert,
    DashboardSnapshot,
    DataSource,
    StationSnapshot,
    StopPrediction,
    StopSnapshot,
    WeatherSnapshot,
)

__all__ = [
    "Alert",
    "DashboardSnapshot",
    "DataSource",
    "StationSnapshot",
    "StopPrediction",
    "StopSnapshot",
    "WeatherSnapshot",
]
