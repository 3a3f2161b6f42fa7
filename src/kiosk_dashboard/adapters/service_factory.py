"""Builds the data sources and the aggregator from configuration."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from kiosk_dashboard.adapters.bluebikes_api import BikeshareService
from kiosk_dashboard.adapters.config import SourceConfigurationLoader
from kiosk_dashboard.adapters.http_client import JsonHttpClient
from kiosk_dashboard.adapters.mbta_api import TransitAlertsService, TransitService
from kiosk_dashboard.adapters.openweather_api import WeatherService
from kiosk_dashboard.application.services import DashboardService

if TYPE_CHECKING:
    from aiohttp import ClientSession

    from kiosk_dashboard.adapters.config import AppConfig
    from kiosk_dashboard.adapters.spotify_api import SpotifyService
    from kiosk_dashboard.domain.contracts.cache import CacheProtocol
    from kiosk_dashboard.domain.contracts.rate_limiter import RateLimiterProtocol

logger = logging.getLogger(__name__)


def build_dashboard_service(
    config: AppConfig,
    session: ClientSession,
    cache: CacheProtocol,
    rate_limiter: RateLimiterProtocol,
    spotify: SpotifyService | None = None,
) -> DashboardService:
    """Construct every enabled source and the aggregator over them.

    Disabled sources are passed to the aggregator as None.
    """
    transit: TransitService | None = None
    alerts: TransitAlertsService | None = None
    bikes: BikeshareService | None = None
    weather: WeatherService | None = None

    if config.enable_mbta:
        mbta_http = JsonHttpClient(session, "MBTA API")
        routes = SourceConfigurationLoader.load_transit_routes(config)
        stops = SourceConfigurationLoader.load_transit_stops(config)
        logger.info(f"Monitoring {len(stops)} transit stop(s) on routes {', '.join(routes)}")
        transit = TransitService(
            http=mbta_http,
            cache=cache,
            rate_limiter=rate_limiter,
            policy=config.rate_limit_policy("mbta"),
            ttl_seconds=config.transit_ttl_seconds,
            api_key=config.mbta_api_key,
            stops=stops,
            routes=routes,
            realtime_max_age=timedelta(minutes=config.transit_realtime_max_age_minutes),
        )
        alerts = TransitAlertsService(
            http=mbta_http,
            cache=cache,
            rate_limiter=rate_limiter,
            policy=config.rate_limit_policy("alerts"),
            ttl_seconds=config.alerts_ttl_seconds,
            api_key=config.mbta_api_key,
            routes=routes,
        )

    if config.enable_bluebikes:
        stations = SourceConfigurationLoader.load_bike_stations(config)
        logger.info(f"Monitoring {len(stations)} bikeshare station(s)")
        bikes = BikeshareService(
            http=JsonHttpClient(session, "Bluebikes GBFS"),
            cache=cache,
            rate_limiter=rate_limiter,
            policy=config.rate_limit_policy("bikeshare"),
            ttl_seconds=config.bikeshare_ttl_seconds,
            stations=stations,
        )

    if config.enable_weather:
        weather = WeatherService(
            http=JsonHttpClient(session, "OpenWeatherMap API"),
            cache=cache,
            rate_limiter=rate_limiter,
            policy=config.rate_limit_policy("weather"),
            ttl_seconds=config.weather_ttl_seconds,
            api_key=config.openweather_api_key,
            latitude=config.latitude,
            longitude=config.longitude,
        )

    return DashboardService(
        cache=cache,
        rate_limiter=rate_limiter,
        policy=config.rate_limit_policy("dashboard"),
        ttl_seconds=config.dashboard_ttl_seconds,
        transit=transit,
        alerts=alerts,
        bikes=bikes,
        weather=weather,
        music=spotify,
    )
