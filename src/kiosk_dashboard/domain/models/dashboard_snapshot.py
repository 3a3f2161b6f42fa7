"""Dashboard snapshot domain model."""

from dataclasses import dataclass
from datetime import datetime

from kiosk_dashboard.domain.models.alert import Alert
from kiosk_dashboard.domain.models.station_snapshot import StationSnapshot
from kiosk_dashboard.domain.models.stop_snapshot import StopSnapshot
from kiosk_dashboard.domain.models.weather_snapshot import WeatherSnapshot


@dataclass(frozen=True)
class DashboardSnapshot:
    """One complete view of all dashboard data at a point in time."""

    transit: tuple[StopSnapshot, ...]
    bikes: tuple[StationSnapshot, ...]
    weather: WeatherSnapshot | None
    alerts: tuple[Alert, ...]
    generated_at: datetime
