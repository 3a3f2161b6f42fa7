"""OpenWeatherMap current conditions source.

API Documentation: https://openweathermap.org/current
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from kiosk_dashboard.adapters.cache.ttl_cache import CacheKeys
from kiosk_dashboard.application.services.cached_source import CachedSource
from kiosk_dashboard.domain.errors import NotConfigured, UpstreamMalformed
from kiosk_dashboard.domain.models.weather_snapshot import HourlyPrecipitation, WeatherSnapshot

if TYPE_CHECKING:
    from kiosk_dashboard.adapters.http_client import JsonHttpClient
    from kiosk_dashboard.domain.contracts.cache import CacheProtocol
    from kiosk_dashboard.domain.contracts.rate_limiter import RateLimiterProtocol
    from kiosk_dashboard.domain.models.rate_limit_policy import RateLimitPolicy

logger = logging.getLogger(__name__)

OPENWEATHER_CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"

# Outlook decay applied to the last hour of rain: (label, factor)
PRECIPITATION_OUTLOOK = (("Now", 1.0), ("1h", 0.8), ("2h", 0.6), ("3h", 0.4), ("4h", 0.2))


def _timestamp(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=UTC)


def parse_current_weather(document: Any) -> WeatherSnapshot:
    """Normalize a current-weather response (imperial units).

    Raises:
        UpstreamMalformed: Required fields are missing or of the wrong type.
    """
    try:
        main = document["main"]
        condition = document["weather"][0]
        rain = float((document.get("rain") or {}).get("1h") or 0)
        return WeatherSnapshot(
            temperature=round(main["temp"]),
            feels_like=round(main["feels_like"]),
            humidity=int(main["humidity"]),
            description=condition["description"],
            icon=condition["icon"],
            wind_speed=round((document.get("wind") or {}).get("speed") or 0),
            precipitation=rain,
            sunrise=_timestamp(document["sys"]["sunrise"]),
            sunset=_timestamp(document["sys"]["sunset"]),
            hourly_precipitation=tuple(
                HourlyPrecipitation(time=label, precipitation=round(rain * factor, 1))
                for label, factor in PRECIPITATION_OUTLOOK
            ),
        )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise UpstreamMalformed(f"Unexpected weather response shape: {e!r}") from e


class WeatherService(CachedSource[WeatherSnapshot | None]):
    """Current conditions at the configured location."""

    name = "weather"
    cache_key = CacheKeys.WEATHER

    def __init__(
        self,
        http: JsonHttpClient,
        cache: CacheProtocol,
        rate_limiter: RateLimiterProtocol,
        policy: RateLimitPolicy,
        ttl_seconds: float,
        api_key: str | None,
        latitude: float,
        longitude: float,
    ) -> None:
        super().__init__(cache, rate_limiter, policy, ttl_seconds)
        self._http = http
        self._api_key = api_key
        self._latitude = latitude
        self._longitude = longitude

    def default(self) -> WeatherSnapshot | None:
        return None

    async def _fetch_upstream(self) -> WeatherSnapshot | None:
        if not self._api_key:
            raise NotConfigured("OpenWeatherMap API key not configured")

        document = await self._http.get_json(
            OPENWEATHER_CURRENT_URL,
            params={
                "lat": self._latitude,
                "lon": self._longitude,
                "appid": self._api_key,
                "units": "imperial",
            },
        )
        weather = parse_current_weather(document)
        logger.debug(f"Weather: {weather.temperature}F, {weather.description}")
        return weather
