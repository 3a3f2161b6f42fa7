"""Tests for the HTTP surface."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.testclient import TestClient

from kiosk_dashboard.adapters.web import create_app
from kiosk_dashboard.domain.errors import NotConfigured, Unauthenticated, UpstreamUnavailable
from kiosk_dashboard.domain.models import (
    DashboardSnapshot,
    DataSource,
    HealthStatus,
    PlaybackDevice,
    PlaybackState,
    SourceHealth,
    StopPrediction,
    StopSnapshot,
)

GENERATED_AT = datetime(2025, 3, 4, 17, 0, tzinfo=UTC)
SNAPSHOT = DashboardSnapshot(
    transit=(
        StopSnapshot(
            stop_id="70229",
            stop_name="Washington Square (C Outbound)",
            predictions=(
                StopPrediction(
                    arrival_time=GENERATED_AT,
                    departure_time=None,
                    direction=0,
                    headsign="Cleveland Circle",
                    source=DataSource.REALTIME,
                ),
            ),
            data_source=DataSource.REALTIME,
        ),
    ),
    bikes=(),
    weather=None,
    alerts=(),
    generated_at=GENERATED_AT,
)


@pytest.fixture
def dashboard_service() -> MagicMock:
    service = MagicMock()
    service.fetch = AsyncMock(return_value=SNAPSHOT)
    service.source_health.return_value = {
        "transit": SourceHealth(status=HealthStatus.HEALTHY),
        "weather": SourceHealth(status=HealthStatus.UNKNOWN, message="disabled"),
    }
    return service


@pytest.fixture
def spotify_service() -> MagicMock:
    service = MagicMock()
    for name in (
        "get_playback_state",
        "exchange_code",
        "play",
        "pause",
        "skip_next",
        "skip_previous",
        "set_volume",
        "get_devices",
        "transfer_to_device",
    ):
        setattr(service, name, AsyncMock())
    service.get_playback_state.return_value = PlaybackState.disconnected()
    service.authorization_url.return_value = "https://accounts.spotify.com/authorize?client_id=x"
    return service


@pytest.fixture
def client(dashboard_service: MagicMock, spotify_service: MagicMock) -> TestClient:
    return TestClient(create_app(dashboard_service, spotify_service), follow_redirects=False)


def test_dashboard_serializes_snapshot(client: TestClient) -> None:
    """Given a snapshot, when requesting the dashboard, then it is returned as JSON."""
    response = client.get("/api/dashboard")

    assert response.status_code == 200
    body = response.json()
    stop = body["transit"][0]
    assert stop["data_source"] == "realtime"
    assert stop["predictions"][0]["headsign"] == "Cleveland Circle"
    assert stop["predictions"][0]["departure_time"] is None
    assert body["weather"] is None
    assert body["generated_at"].startswith("2025-03-04T17:00:00")


def test_dashboard_unexpected_failure_is_500(
    client: TestClient, dashboard_service: MagicMock
) -> None:
    dashboard_service.fetch.side_effect = RuntimeError("bug")

    response = client.get("/api/dashboard")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch dashboard data"}


def test_status_reports_source_health(client: TestClient) -> None:
    response = client.get("/api/status")

    body = response.json()
    assert body["status"] == "healthy"
    assert body["services"]["transit"] == {"status": "healthy", "message": None}
    assert body["services"]["weather"] == {"status": "unknown", "message": "disabled"}
    assert "timestamp" in body


def test_healthz(client: TestClient) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.text == "Ok"


def test_spotify_auth_redirects(client: TestClient) -> None:
    response = client.get("/api/spotify/auth")

    assert response.status_code == 302
    assert response.headers["location"].startswith("https://accounts.spotify.com/authorize")


def test_spotify_auth_not_configured(client: TestClient, spotify_service: MagicMock) -> None:
    spotify_service.authorization_url.side_effect = NotConfigured("Spotify not configured")

    response = client.get("/api/spotify/auth")

    assert response.status_code == 503


def test_spotify_callback_exchanges_code(client: TestClient, spotify_service: MagicMock) -> None:
    """Given a code, when the callback is hit, then it is exchanged and the user sent home."""
    response = client.get("/api/spotify/callback", params={"code": "abc"})

    spotify_service.exchange_code.assert_awaited_once_with("abc")
    assert response.headers["location"] == "/?spotify_connected=true"


@pytest.mark.parametrize(
    ("params", "location"),
    [
        ({"error": "access_denied"}, "/?spotify_error=access_denied"),
        ({}, "/?spotify_error=no_code"),
    ],
)
def test_spotify_callback_errors(
    client: TestClient, params: dict[str, str], location: str
) -> None:
    response = client.get("/api/spotify/callback", params=params)

    assert response.headers["location"] == location


def test_spotify_callback_exchange_failure(client: TestClient, spotify_service: MagicMock) -> None:
    spotify_service.exchange_code.side_effect = UpstreamUnavailable("token endpoint down")

    response = client.get("/api/spotify/callback", params={"code": "abc"})

    assert response.headers["location"] == "/?spotify_error=callback_failed"


def test_player_state_unauthenticated_is_401(
    client: TestClient, spotify_service: MagicMock
) -> None:
    spotify_service.get_playback_state.return_value = PlaybackState.unauthenticated()

    response = client.get("/api/spotify/player")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


def test_player_state_disconnected(client: TestClient) -> None:
    response = client.get("/api/spotify/player")

    assert response.status_code == 200
    assert response.json() == {
        "track": None,
        "device": None,
        "is_connected": False,
        "is_authenticated": True,
    }


@pytest.mark.parametrize("action", ["play", "pause"])
def test_player_action(client: TestClient, spotify_service: MagicMock, action: str) -> None:
    response = client.post("/api/spotify/player", json={"action": action})

    assert response.json() == {"success": True}
    getattr(spotify_service, action).assert_awaited_once()


def test_player_invalid_action_is_400(client: TestClient) -> None:
    response = client.post("/api/spotify/player", json={"action": "dance"})

    assert response.status_code == 400


def test_player_control_without_credential_is_401(
    client: TestClient, spotify_service: MagicMock
) -> None:
    spotify_service.skip_next.side_effect = Unauthenticated("no token")

    response = client.post("/api/spotify/player/next")

    assert response.status_code == 401


def test_player_control_upstream_failure_is_502(
    client: TestClient, spotify_service: MagicMock
) -> None:
    spotify_service.skip_previous.side_effect = UpstreamUnavailable("503")

    response = client.post("/api/spotify/player/previous")

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to skip to previous track"}


def test_volume(client: TestClient, spotify_service: MagicMock) -> None:
    response = client.post("/api/spotify/player/volume", json={"volume": 55})

    assert response.status_code == 200
    spotify_service.set_volume.assert_awaited_once_with(55)


@pytest.mark.parametrize("body", [{}, {"volume": "loud"}, {"volume": True}])
def test_volume_invalid_is_400(client: TestClient, body: dict[str, object]) -> None:
    response = client.post("/api/spotify/player/volume", json=body)

    assert response.status_code == 400


def test_devices(client: TestClient, spotify_service: MagicMock) -> None:
    spotify_service.get_devices.return_value = [
        PlaybackDevice(id="d1", name="Kitchen", type="Speaker", volume=20, is_active=True)
    ]

    response = client.get("/api/spotify/devices")

    devices = response.json()["devices"]
    assert devices[0]["id"] == "d1"
    assert devices[0]["is_active"] is True


def test_transfer(client: TestClient, spotify_service: MagicMock) -> None:
    response = client.post("/api/spotify/transfer", json={"deviceId": "d1", "play": True})

    assert response.status_code == 200
    spotify_service.transfer_to_device.assert_awaited_once_with("d1", play=True)


def test_transfer_requires_device(client: TestClient) -> None:
    response = client.post("/api/spotify/transfer", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Device ID is required"}
