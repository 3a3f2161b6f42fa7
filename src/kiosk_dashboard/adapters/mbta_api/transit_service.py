"""MBTA transit prediction and alert sources."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

from kiosk_dashboard.adapters.cache.ttl_cache import CacheKeys
from kiosk_dashboard.adapters.mbta_api.constants import (
    MBTA_ACCEPT_HEADER,
    MBTA_ALERT_ACTIVITIES,
    MBTA_ALERTS_URL,
    MBTA_PREDICTIONS_URL,
    MBTA_SCHEDULES_URL,
    MBTA_TIMEZONE,
)
from kiosk_dashboard.adapters.mbta_api.parser import parse_alerts, parse_stop_predictions
from kiosk_dashboard.application.services.cached_source import CachedSource
from kiosk_dashboard.application.services.transit_merge import (
    DEFAULT_REALTIME_MAX_AGE,
    merge_stop_predictions,
)
from kiosk_dashboard.domain.errors import NotConfigured
from kiosk_dashboard.domain.models.alert import Alert
from kiosk_dashboard.domain.models.data_source import DataSource
from kiosk_dashboard.domain.models.stop_snapshot import StopSnapshot

if TYPE_CHECKING:
    from kiosk_dashboard.adapters.http_client import JsonHttpClient
    from kiosk_dashboard.domain.contracts.cache import CacheProtocol
    from kiosk_dashboard.domain.contracts.rate_limiter import RateLimiterProtocol
    from kiosk_dashboard.domain.models.rate_limit_policy import RateLimitPolicy
    from kiosk_dashboard.domain.models.source_configuration import TransitStopConfiguration
    from kiosk_dashboard.domain.models.stop_prediction import StopPrediction

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _mbta_headers(api_key: str) -> dict[str, str]:
    return {"Accept": MBTA_ACCEPT_HEADER, "x-api-key": api_key}


class TransitService(CachedSource[list[StopSnapshot]]):
    """Realtime predictions merged with scheduled times for the configured stops."""

    name = "transit"
    cache_key = CacheKeys.TRANSIT

    def __init__(
        self,
        http: JsonHttpClient,
        cache: CacheProtocol,
        rate_limiter: RateLimiterProtocol,
        policy: RateLimitPolicy,
        ttl_seconds: float,
        api_key: str | None,
        stops: list[TransitStopConfiguration],
        routes: list[str],
        realtime_max_age: timedelta = DEFAULT_REALTIME_MAX_AGE,
        timezone: str = MBTA_TIMEZONE,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the transit source.

        Args:
            http: JSON client for the MBTA API.
            cache: Shared TTL cache.
            rate_limiter: Shared rate limiter.
            policy: Rate limit policy for predictions.
            ttl_seconds: Freshness of merged predictions.
            api_key: MBTA API key (None disables fetching).
            stops: Stops to monitor, in display order.
            routes: Route ids used to filter predictions and schedules.
            realtime_max_age: Realtime predictions older than this are dropped.
            timezone: Local timezone of the transit system (for schedule queries).
            now: Wall clock returning an aware datetime.
        """
        super().__init__(cache, rate_limiter, policy, ttl_seconds)
        self._http = http
        self._api_key = api_key
        self._stops = stops
        self._routes = routes
        self._realtime_max_age = realtime_max_age
        self._timezone = ZoneInfo(timezone)
        self._now = now

    def default(self) -> list[StopSnapshot]:
        return []

    def _as_stale(self, value: list[StopSnapshot]) -> list[StopSnapshot]:
        return [replace(stop, data_source=DataSource.CACHED) for stop in value]

    def _base_params(self) -> dict[str, str]:
        return {
            "filter[stop]": ",".join(stop.stop_id for stop in self._stops),
            "filter[route]": ",".join(self._routes),
            "include": "stop,trip",
            "sort": "arrival_time",
        }

    async def _fetch_realtime(self, api_key: str) -> dict[str, list[StopPrediction]]:
        document = await self._http.get_json(
            MBTA_PREDICTIONS_URL, params=self._base_params(), headers=_mbta_headers(api_key)
        )
        return parse_stop_predictions(document, DataSource.REALTIME)

    async def _fetch_scheduled(
        self, api_key: str, now: datetime
    ) -> dict[str, list[StopPrediction]]:
        local_now = now.astimezone(self._timezone)
        params = self._base_params()
        params["filter[date]"] = local_now.date().isoformat()
        params["filter[min_time]"] = local_now.strftime("%H:%M")
        document = await self._http.get_json(
            MBTA_SCHEDULES_URL, params=params, headers=_mbta_headers(api_key)
        )
        return parse_stop_predictions(document, DataSource.SCHEDULED)

    async def _fetch_upstream(self) -> list[StopSnapshot]:
        if not self._api_key:
            raise NotConfigured("MBTA API key not configured")

        now = self._now()
        results: list[Any] = await asyncio.gather(
            self._fetch_realtime(self._api_key),
            self._fetch_scheduled(self._api_key, now),
            return_exceptions=True,
        )
        realtime_result, scheduled_result = results
        if isinstance(realtime_result, BaseException) and isinstance(
            scheduled_result, BaseException
        ):
            raise realtime_result

        realtime: dict[str, list[StopPrediction]] = {}
        scheduled: dict[str, list[StopPrediction]] = {}
        if isinstance(realtime_result, BaseException):
            logger.warning(f"Realtime predictions unavailable, using schedules: {realtime_result}")
        else:
            realtime = realtime_result
        if isinstance(scheduled_result, BaseException):
            logger.warning(f"Schedules unavailable, using realtime only: {scheduled_result}")
        else:
            scheduled = scheduled_result

        snapshots = [
            merge_stop_predictions(
                stop,
                realtime.get(stop.stop_id, []),
                scheduled.get(stop.stop_id, []),
                now,
                self._realtime_max_age,
            )
            for stop in self._stops
        ]
        logger.debug(
            "Merged transit predictions: "
            + ", ".join(f"{s.stop_id}={len(s.predictions)}/{s.data_source}" for s in snapshots)
        )
        return snapshots


class TransitAlertsService(CachedSource[list[Alert]]):
    """Service alerts for the configured routes."""

    name = "alerts"
    cache_key = CacheKeys.TRANSIT_ALERTS

    def __init__(
        self,
        http: JsonHttpClient,
        cache: CacheProtocol,
        rate_limiter: RateLimiterProtocol,
        policy: RateLimitPolicy,
        ttl_seconds: float,
        api_key: str | None,
        routes: list[str],
    ) -> None:
        super().__init__(cache, rate_limiter, policy, ttl_seconds)
        self._http = http
        self._api_key = api_key
        self._routes = routes

    def default(self) -> list[Alert]:
        return []

    async def _fetch_upstream(self) -> list[Alert]:
        if not self._api_key:
            raise NotConfigured("MBTA API key not configured")

        document = await self._http.get_json(
            MBTA_ALERTS_URL,
            params={
                "filter[route]": ",".join(self._routes),
                "filter[activity]": MBTA_ALERT_ACTIVITIES,
            },
            headers=_mbta_headers(self._api_key),
        )
        alerts = parse_alerts(document)
        logger.debug(f"Fetched {len(alerts)} alerts for routes {self._routes}")
        return alerts
