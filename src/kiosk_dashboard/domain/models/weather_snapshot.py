"""Weather snapshot domain model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class HourlyPrecipitation:
    """Precipitation outlook for one slot ("Now", "1h", ...)."""

    time: str
    precipitation: float


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current conditions in imperial units."""

    temperature: int
    feels_like: int
    humidity: int
    description: str
    icon: str
    wind_speed: int
    precipitation: float  # mm over the last hour
    sunrise: datetime
    sunset: datetime
    hourly_precipitation: tuple[HourlyPrecipitation, ...]
