"""Bluebikes station availability source.

Uses the public GBFS feed: https://gbfs.bluebikes.com/gbfs/gbfs.json
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from kiosk_dashboard.adapters.cache.ttl_cache import CacheKeys
from kiosk_dashboard.application.services.cached_source import CachedSource
from kiosk_dashboard.domain.errors import DashboardError, UpstreamMalformed
from kiosk_dashboard.domain.models.source_health import HealthStatus, SourceHealth
from kiosk_dashboard.domain.models.station_snapshot import StationSnapshot

if TYPE_CHECKING:
    from kiosk_dashboard.adapters.http_client import JsonHttpClient
    from kiosk_dashboard.domain.contracts.cache import CacheProtocol
    from kiosk_dashboard.domain.contracts.rate_limiter import RateLimiterProtocol
    from kiosk_dashboard.domain.models.rate_limit_policy import RateLimitPolicy
    from kiosk_dashboard.domain.models.source_configuration import BikeStationConfiguration

logger = logging.getLogger(__name__)

BLUEBIKES_STATION_STATUS_URL = "https://gbfs.bluebikes.com/gbfs/en/station_status.json"
BLUEBIKES_SYSTEM_STATUS_URL = "https://gbfs.bluebikes.com/gbfs/en/system_status.json"
SYSTEM_UNAVAILABLE_MESSAGE = "System temporarily unavailable"


class BikeshareService(CachedSource[list[StationSnapshot]]):
    """Bike and dock availability for the configured stations."""

    name = "bikeshare"
    cache_key = CacheKeys.BIKESHARE

    def __init__(
        self,
        http: JsonHttpClient,
        cache: CacheProtocol,
        rate_limiter: RateLimiterProtocol,
        policy: RateLimitPolicy,
        ttl_seconds: float,
        stations: list[BikeStationConfiguration],
        url: str = BLUEBIKES_STATION_STATUS_URL,
        system_status_url: str = BLUEBIKES_SYSTEM_STATUS_URL,
    ) -> None:
        super().__init__(cache, rate_limiter, policy, ttl_seconds)
        self._http = http
        self._stations = stations
        self._url = url
        self._system_status_url = system_status_url
        # None until system_status has been read successfully
        self._system_renting: bool | None = None

    def default(self) -> list[StationSnapshot]:
        return []

    @staticmethod
    def _parse_station(raw: dict[str, Any], name: str) -> StationSnapshot:
        return StationSnapshot(
            station_id=str(raw["station_id"]),
            name=name,
            bikes=int(raw["num_bikes_available"]),
            docks=int(raw["num_docks_available"]),
            ebikes=int(raw.get("num_ebikes_available") or 0),
            scooters=int(raw.get("num_scooters_available") or 0),
            installed=bool(raw.get("is_installed")),
            renting=bool(raw.get("is_renting")),
        )

    def health(self) -> SourceHealth:
        """Fetch outcome, degraded while the system reports it is not renting."""
        health = super().health()
        if health.status == HealthStatus.HEALTHY and self._system_renting is False:
            return SourceHealth(status=HealthStatus.DEGRADED, message=SYSTEM_UNAVAILABLE_MESSAGE)
        return health

    async def _refresh_system_status(self) -> None:
        try:
            document = await self._http.get_json(self._system_status_url)
            self._system_renting = bool(document["data"]["is_renting"])
        except (DashboardError, KeyError, TypeError) as e:
            logger.warning(f"Could not read bikeshare system status: {e!r}")
            self._system_renting = None

    async def _fetch_station_status(self) -> list[StationSnapshot]:
        document = await self._http.get_json(self._url)
        try:
            raw_stations = document["data"]["stations"]
            by_id = {str(raw["station_id"]): raw for raw in raw_stations}
            snapshots = [
                self._parse_station(by_id[station.station_id], station.name)
                for station in self._stations
                if station.station_id in by_id
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamMalformed(f"Unexpected station_status shape: {e!r}") from e

        missing = len(self._stations) - len(snapshots)
        if missing:
            logger.warning(f"{missing} configured station(s) not present in station_status feed")
        return snapshots

    async def _fetch_upstream(self) -> list[StationSnapshot]:
        snapshots, _ = await asyncio.gather(
            self._fetch_station_status(), self._refresh_system_status()
        )
        return snapshots
