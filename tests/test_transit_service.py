"""Tests for the MBTA transit and alert sources."""

from datetime import UTC, datetime
from typing import Any

import pytest

from kiosk_dashboard.adapters.api_rate_limiter import SlidingWindowRateLimiter
from kiosk_dashboard.adapters.cache import TtlCache
from kiosk_dashboard.adapters.mbta_api import TransitAlertsService, TransitService
from kiosk_dashboard.adapters.mbta_api.constants import (
    MBTA_ALERTS_URL,
    MBTA_PREDICTIONS_URL,
    MBTA_SCHEDULES_URL,
)
from kiosk_dashboard.domain.errors import UpstreamUnavailable
from kiosk_dashboard.domain.models import (
    INBOUND,
    OUTBOUND,
    DataSource,
    HealthStatus,
    RateLimitPolicy,
    TransitStopConfiguration,
)

NOW = datetime(2025, 3, 4, 17, 0, tzinfo=UTC)
STOPS = [
    TransitStopConfiguration(stop_id="70229", name="Washington Square (C Outbound)"),
    TransitStopConfiguration(stop_id="70176", name="Beaconsfield (D Inbound)"),
]
ROUTES = ["Green-C", "Green-D"]


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeHttpClient:
    """Returns (or raises) a canned outcome per URL and records every call."""

    def __init__(self, outcomes: dict[str, Any]) -> None:
        self.outcomes = outcomes
        self.calls: list[tuple[str, dict[str, Any] | None, dict[str, str] | None]] = []

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        self.calls.append((url, params, headers))
        outcome = self.outcomes[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def entry(stop_id: str, time: str, direction: int = OUTBOUND) -> dict[str, Any]:
    return {
        "id": f"{stop_id}-{time}",
        "attributes": {"arrival_time": time, "departure_time": time, "direction_id": direction},
        "relationships": {"stop": {"data": {"id": stop_id}}, "trip": {"data": {"id": "t"}}},
    }


REALTIME_DOC = {
    "data": [
        entry("70229", "2025-03-04T12:04:00-05:00"),
        entry("70176", "2025-03-04T12:06:00-05:00", INBOUND),
    ],
    "included": [{"id": "t", "type": "trip", "attributes": {"headsign": "Somewhere"}}],
}
SCHEDULES_DOC = {
    "data": [
        entry("70229", "2025-03-04T12:05:00-05:00"),
        entry("70229", "2025-03-04T12:15:00-05:00"),
    ]
}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_transit(
    http: FakeHttpClient, clock: FakeClock, api_key: str | None = "secret"
) -> TransitService:
    return TransitService(
        http=http,  # type: ignore[arg-type]
        cache=TtlCache(clock=clock),
        rate_limiter=SlidingWindowRateLimiter(clock=clock),
        policy=RateLimitPolicy(key="mbta_api", window_seconds=1, max_requests=10),
        ttl_seconds=15,
        api_key=api_key,
        stops=STOPS,
        routes=ROUTES,
        now=lambda: NOW,
    )


@pytest.mark.asyncio
async def test_merges_realtime_and_schedules_per_configured_stop(clock: FakeClock) -> None:
    """Given both feeds, when fetching, then each stop is merged in configured order."""
    http = FakeHttpClient({MBTA_PREDICTIONS_URL: REALTIME_DOC, MBTA_SCHEDULES_URL: SCHEDULES_DOC})
    service = make_transit(http, clock)

    stops = await service.fetch()

    assert [s.stop_id for s in stops] == ["70229", "70176"]
    washington = stops[0]
    assert [p.source for p in washington.predictions] == [
        DataSource.REALTIME,
        DataSource.SCHEDULED,
    ]
    assert washington.predictions[1].time.hour == 17 and washington.predictions[1].time.minute == 15
    assert washington.data_source == DataSource.MIXED
    assert stops[1].data_source == DataSource.REALTIME
    assert service.health().status == HealthStatus.HEALTHY


@pytest.mark.asyncio
async def test_requests_are_filtered_and_authenticated(clock: FakeClock) -> None:
    """Given configured stops and routes, when fetching, then requests carry filters and the key."""
    http = FakeHttpClient({MBTA_PREDICTIONS_URL: REALTIME_DOC, MBTA_SCHEDULES_URL: SCHEDULES_DOC})
    service = make_transit(http, clock)

    await service.fetch()

    calls = {url: (params, headers) for url, params, headers in http.calls}
    params, headers = calls[MBTA_PREDICTIONS_URL]
    assert params is not None and headers is not None
    assert params["filter[stop]"] == "70229,70176"
    assert params["filter[route]"] == "Green-C,Green-D"
    assert headers["x-api-key"] == "secret"
    assert headers["Accept"] == "application/vnd.api+json"

    schedule_params, _ = calls[MBTA_SCHEDULES_URL]
    assert schedule_params is not None
    assert schedule_params["filter[date]"] == "2025-03-04"
    assert schedule_params["filter[min_time]"] == "12:00"


@pytest.mark.asyncio
async def test_realtime_failure_falls_back_to_schedules(clock: FakeClock) -> None:
    """Given the predictions feed down, when fetching, then schedules alone are served."""
    http = FakeHttpClient(
        {
            MBTA_PREDICTIONS_URL: UpstreamUnavailable("down", status_code=503),
            MBTA_SCHEDULES_URL: SCHEDULES_DOC,
        }
    )
    service = make_transit(http, clock)

    stops = await service.fetch()

    assert stops[0].data_source == DataSource.SCHEDULED
    assert len(stops[0].predictions) == 2
    assert stops[1].predictions == ()


@pytest.mark.asyncio
async def test_schedule_failure_serves_realtime_alone(clock: FakeClock) -> None:
    """Given the schedules feed down, when fetching, then realtime predictions alone are served."""
    http = FakeHttpClient(
        {
            MBTA_PREDICTIONS_URL: REALTIME_DOC,
            MBTA_SCHEDULES_URL: UpstreamUnavailable("down", status_code=502),
        }
    )
    service = make_transit(http, clock)

    stops = await service.fetch()

    assert [s.stop_id for s in stops] == ["70229", "70176"]
    assert {s.data_source for s in stops} == {DataSource.REALTIME}
    assert [len(s.predictions) for s in stops] == [1, 1]
    assert all(p.source == DataSource.REALTIME for s in stops for p in s.predictions)
    assert service.health().status == HealthStatus.HEALTHY


@pytest.mark.asyncio
async def test_both_feeds_failing_degrades_to_stale_cached(clock: FakeClock) -> None:
    """Given an earlier success, when both feeds fail, then stale stops are tagged cached."""
    http = FakeHttpClient({MBTA_PREDICTIONS_URL: REALTIME_DOC, MBTA_SCHEDULES_URL: SCHEDULES_DOC})
    service = make_transit(http, clock)
    await service.fetch()

    http.outcomes = {
        MBTA_PREDICTIONS_URL: UpstreamUnavailable("down"),
        MBTA_SCHEDULES_URL: UpstreamUnavailable("down"),
    }
    clock.now = 16
    stops = await service.fetch()

    assert len(stops) == 2
    assert {s.data_source for s in stops} == {DataSource.CACHED}
    assert service.health().status == HealthStatus.DEGRADED


@pytest.mark.asyncio
async def test_missing_api_key_serves_empty_without_calls(clock: FakeClock) -> None:
    """Given no API key, when fetching, then nothing is requested and the result is empty."""
    http = FakeHttpClient({})
    service = make_transit(http, clock, api_key=None)

    assert await service.fetch() == []
    assert http.calls == []
    assert service.health().status == HealthStatus.UNKNOWN


@pytest.mark.asyncio
async def test_alerts_are_fetched_for_configured_routes(clock: FakeClock) -> None:
    """Given an alerts feed, when fetching alerts, then they are parsed and cached."""
    http = FakeHttpClient(
        {
            MBTA_ALERTS_URL: {
                "data": [
                    {
                        "id": "1",
                        "attributes": {
                            "header": "Delays",
                            "short_header": "Delays",
                            "severity": 3,
                            "effect": "DELAY",
                        },
                    }
                ]
            }
        }
    )
    service = TransitAlertsService(
        http=http,  # type: ignore[arg-type]
        cache=TtlCache(clock=clock),
        rate_limiter=SlidingWindowRateLimiter(clock=clock),
        policy=RateLimitPolicy(key="alerts_api", window_seconds=60, max_requests=5),
        ttl_seconds=600,
        api_key="secret",
        routes=ROUTES,
    )

    alerts = await service.fetch()
    again = await service.fetch()

    assert [a.header for a in alerts] == ["Delays"]
    assert again == alerts
    assert len(http.calls) == 1
    _, params, _ = http.calls[0]
    assert params == {"filter[route]": "Green-C,Green-D", "filter[activity]": "BOARD,EXIT,RIDE"}
