"""Tests for the Bluebikes station availability source."""

from typing import Any

import pytest

from kiosk_dashboard.adapters.api_rate_limiter import SlidingWindowRateLimiter
from kiosk_dashboard.adapters.bluebikes_api import BikeshareService
from kiosk_dashboard.adapters.bluebikes_api.bikeshare_service import (
    BLUEBIKES_STATION_STATUS_URL,
    BLUEBIKES_SYSTEM_STATUS_URL,
)
from kiosk_dashboard.adapters.cache import TtlCache
from kiosk_dashboard.domain.errors import UpstreamUnavailable
from kiosk_dashboard.domain.models import (
    BikeStationConfiguration,
    HealthStatus,
    RateLimitPolicy,
    SourceHealth,
)

STATIONS = [
    BikeStationConfiguration(station_id="s-2", name="Coolidge Corner"),
    BikeStationConfiguration(station_id="s-1", name="Washington Sq"),
    BikeStationConfiguration(station_id="s-missing", name="Gone"),
]


RENTING = {"data": {"is_renting": 1}}


class FakeHttpClient:
    """Answers station_status with `outcome` and system_status with `system`."""

    def __init__(self, outcome: Any, system: Any = RENTING) -> None:
        self.outcome = outcome
        self.system = system
        self.urls: list[str] = []

    async def get_json(self, url: str, params: Any = None, headers: Any = None) -> Any:
        self.urls.append(url)
        result = self.system if url == BLUEBIKES_SYSTEM_STATUS_URL else self.outcome
        if isinstance(result, BaseException):
            raise result
        return result


def station_status(station_id: str, bikes: int, docks: int, ebikes: int = 0) -> dict[str, Any]:
    return {
        "station_id": station_id,
        "num_bikes_available": bikes,
        "num_docks_available": docks,
        "num_ebikes_available": ebikes,
        "is_installed": 1,
        "is_renting": 1,
    }


def make_service(http: FakeHttpClient) -> BikeshareService:
    clock = lambda: 0.0  # noqa: E731
    return BikeshareService(
        http=http,  # type: ignore[arg-type]
        cache=TtlCache(clock=clock),
        rate_limiter=SlidingWindowRateLimiter(clock=clock),
        policy=RateLimitPolicy(key="bikeshare_api", window_seconds=60, max_requests=30),
        ttl_seconds=30,
        stations=STATIONS,
    )


@pytest.mark.asyncio
async def test_returns_configured_stations_in_configured_order() -> None:
    """Given a feed with extra stations, when fetching, then only configured ones are returned."""
    http = FakeHttpClient(
        {
            "data": {
                "stations": [
                    station_status("s-1", bikes=3, docks=12, ebikes=1),
                    station_status("s-9", bikes=0, docks=0),
                    station_status("s-2", bikes=7, docks=4),
                ]
            }
        }
    )
    service = make_service(http)

    stations = await service.fetch()

    assert [s.station_id for s in stations] == ["s-2", "s-1"]
    assert stations[0].name == "Coolidge Corner"
    assert stations[0].bikes == 7
    assert stations[1].ebikes == 1
    assert stations[1].installed is True and stations[1].renting is True
    assert sorted(http.urls) == sorted([BLUEBIKES_STATION_STATUS_URL, BLUEBIKES_SYSTEM_STATUS_URL])


@pytest.mark.asyncio
async def test_malformed_feed_degrades_to_empty() -> None:
    """Given a feed without station data, when fetching, then an empty list is served."""
    service = make_service(FakeHttpClient({"data": {}}))

    assert await service.fetch() == []
    health = service.health()
    assert health.status == HealthStatus.DEGRADED
    assert health.message == "Malformed upstream response"


FEED = {"data": {"stations": [station_status("s-1", bikes=3, docks=12)]}}


@pytest.mark.asyncio
async def test_operating_system_reports_healthy() -> None:
    """Given a renting system, when fetching, then health is healthy."""
    service = make_service(FakeHttpClient(FEED))

    await service.fetch()

    assert service.health() == SourceHealth(status=HealthStatus.HEALTHY)


@pytest.mark.asyncio
async def test_system_not_renting_reports_maintenance() -> None:
    """Given a system that is not renting, when fetching, then health is degraded."""
    service = make_service(FakeHttpClient(FEED, system={"data": {"is_renting": 0}}))

    stations = await service.fetch()

    assert [s.station_id for s in stations] == ["s-1"]
    assert service.health() == SourceHealth(
        status=HealthStatus.DEGRADED, message="System temporarily unavailable"
    )


@pytest.mark.asyncio
async def test_system_status_failure_does_not_fail_station_data() -> None:
    """Given an unreachable system_status feed, when fetching, then stations are still served."""
    service = make_service(FakeHttpClient(FEED, system=UpstreamUnavailable("down", 503)))

    stations = await service.fetch()

    assert [s.station_id for s in stations] == ["s-1"]
    assert service.health().status == HealthStatus.HEALTHY
