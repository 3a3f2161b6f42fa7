"""Spotify playback state and transport control.

Not part of the polling model: every call is a direct proxy to the Web API,
neither cached nor rate limited by the shared policy.
API Documentation: https://developer.spotify.com/documentation/web-api
"""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from kiosk_dashboard.adapters.spotify_api.session import SpotifySession
from kiosk_dashboard.domain.errors import (
    DashboardError,
    NotConfigured,
    Unauthenticated,
    UpstreamMalformed,
    UpstreamUnavailable,
)
from kiosk_dashboard.domain.models.playback_state import PlaybackDevice, PlaybackState, Track
from kiosk_dashboard.domain.models.source_health import HealthStatus, SourceHealth

if TYPE_CHECKING:
    from kiosk_dashboard.adapters.http_client import HttpResponse, JsonHttpClient

logger = logging.getLogger(__name__)

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_PLAYER_URL = "https://api.spotify.com/v1/me/player"
SPOTIFY_SCOPES = (
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
)


def _parse_device(raw: dict[str, Any]) -> PlaybackDevice:
    return PlaybackDevice(
        id=raw.get("id"),
        name=raw.get("name") or "Unknown device",
        type=raw.get("type") or "Unknown",
        volume=raw.get("volume_percent"),
        is_active=bool(raw.get("is_active")),
        is_restricted=bool(raw.get("is_restricted")),
        supports_volume=bool(raw.get("supports_volume", True)),
    )


def _parse_track(body: dict[str, Any]) -> Track | None:
    item = body.get("item")
    if not item:
        return None
    artists = item.get("artists") or []
    images = (item.get("album") or {}).get("images") or []
    return Track(
        id=item["id"],
        name=item["name"],
        artist=artists[0]["name"] if artists else "Unknown Artist",
        album=(item.get("album") or {}).get("name", ""),
        art_url=images[0]["url"] if images else None,
        duration_ms=int(item.get("duration_ms") or 0),
        progress_ms=int(body.get("progress_ms") or 0),
        is_playing=bool(body.get("is_playing")),
        uri=item.get("uri", ""),
    )


def parse_playback_state(body: Any) -> PlaybackState:
    """Normalize a ``GET /me/player`` body.

    Raises:
        UpstreamMalformed: The body does not have the expected shape.
    """
    if not isinstance(body, dict):
        raise UpstreamMalformed("Expected a JSON object for playback state")
    try:
        device = _parse_device(body["device"]) if body.get("device") else None
        return PlaybackState(
            track=_parse_track(body),
            device=device,
            is_connected=device.is_active if device else False,
            is_authenticated=True,
        )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise UpstreamMalformed(f"Unexpected playback state shape: {e!r}") from e


class SpotifyService:
    """Music integration holding a server-side bearer credential."""

    name = "music"

    def __init__(
        self,
        http: JsonHttpClient,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str | None,
        session: SpotifySession | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            http: JSON client for the Spotify APIs.
            client_id: OAuth client id.
            client_secret: OAuth client secret.
            redirect_uri: Redirect URI registered for the authorization-code flow.
            session: Credential holder (a fresh empty one by default).
        """
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._session = session or SpotifySession()

    @property
    def session(self) -> SpotifySession:
        return self._session

    @property
    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret and self._redirect_uri)

    def authorization_url(self, state: str | None = None) -> str:
        """Build the authorize URL the user is redirected to."""
        if not self.is_configured:
            raise NotConfigured("Spotify client credentials not configured")
        params = {
            "client_id": self._client_id or "",
            "response_type": "code",
            "redirect_uri": self._redirect_uri or "",
            "scope": " ".join(SPOTIFY_SCOPES),
        }
        if state:
            params["state"] = state
        return f"{SPOTIFY_AUTHORIZE_URL}?{urlencode(params)}"

    def _basic_auth_header(self) -> dict[str, str]:
        credentials = f"{self._client_id}:{self._client_secret}".encode()
        return {"Authorization": f"Basic {base64.b64encode(credentials).decode()}"}

    async def _request_token(self, form: dict[str, str]) -> None:
        if not self.is_configured:
            raise NotConfigured("Spotify client credentials not configured")

        response = await self._http.request(
            "POST", SPOTIFY_TOKEN_URL, headers=self._basic_auth_header(), data=form
        )
        if not response.ok:
            raise UpstreamUnavailable(
                f"Spotify token endpoint returned status {response.status}",
                status_code=response.status,
            )
        try:
            self._session.update(
                access_token=response.body["access_token"],
                expires_in=float(response.body["expires_in"]),
                refresh_token=response.body.get("refresh_token"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamMalformed(f"Unexpected token response shape: {e!r}") from e

    async def exchange_code(self, code: str) -> None:
        """Complete the authorization-code flow and store the credential."""
        await self._request_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._redirect_uri or "",
            }
        )

    async def refresh(self) -> None:
        """Obtain a new access token with the held refresh token.

        A refresh token rejected by the token endpoint (400 or 401) clears the
        session and raises Unauthenticated.
        """
        refresh_token = self._session.refresh_token
        if not refresh_token:
            raise Unauthenticated("No Spotify refresh token held")
        try:
            await self._request_token(
                {"grant_type": "refresh_token", "refresh_token": refresh_token}
            )
        except UpstreamUnavailable as e:
            if e.status_code in (400, 401):
                logger.info("Spotify rejected the refresh token, clearing session")
                self._session.clear()
                raise Unauthenticated("Spotify rejected the refresh token") from e
            raise

    def set_access_token(
        self, token: str, expires_in: float, refresh_token: str | None = None
    ) -> None:
        self._session.update(token, expires_in, refresh_token)

    async def _resolve_token(self, token: str | None) -> str | None:
        """Explicit token, else the held one, refreshing it once if it expired."""
        if token:
            return token
        if self._session.access_token:
            return self._session.access_token
        if self._session.refresh_token and self.is_configured:
            try:
                await self.refresh()
            except DashboardError as e:
                logger.warning(f"Spotify token refresh failed: {e}")
                return None
            return self._session.access_token
        return None

    @staticmethod
    def _bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    async def get_playback_state(self, token: str | None = None) -> PlaybackState:
        """Current playback state; never raises.

        A 401 clears the held credential. 204/404 mean no active device.
        """
        access_token = await self._resolve_token(token)
        if access_token is None:
            return PlaybackState.unauthenticated()

        try:
            response = await self._http.request(
                "GET", SPOTIFY_PLAYER_URL, headers=self._bearer(access_token)
            )
            if response.status == 401:
                logger.info("Spotify rejected the access token, clearing session")
                self._session.clear()
                return PlaybackState.unauthenticated()
            if response.status in (204, 404) or (response.ok and not response.body):
                return PlaybackState.disconnected()
            if not response.ok:
                logger.warning(f"Spotify player returned status {response.status}")
                return PlaybackState.disconnected()
            return parse_playback_state(response.body)
        except (UpstreamUnavailable, UpstreamMalformed) as e:
            logger.error(f"Error fetching Spotify playback state: {e}")
            return PlaybackState.disconnected()

    async def get_devices(self, token: str | None = None) -> list[PlaybackDevice]:
        """Devices available to the account."""
        response = await self._command("GET", "/devices", token)
        try:
            return [_parse_device(raw) for raw in (response.body or {}).get("devices", [])]
        except (AttributeError, TypeError) as e:
            raise UpstreamMalformed(f"Unexpected devices response shape: {e!r}") from e

    async def _command(
        self,
        method: str,
        path: str,
        token: str | None,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> HttpResponse:
        access_token = await self._resolve_token(token)
        if access_token is None:
            raise Unauthenticated("Not authenticated with Spotify")

        response = await self._http.request(
            method,
            f"{SPOTIFY_PLAYER_URL}{path}",
            params=params,
            headers=self._bearer(access_token),
            json=json,
        )
        if response.status == 401:
            self._session.clear()
            raise Unauthenticated("Spotify rejected the access token")
        if not response.ok:
            raise UpstreamUnavailable(
                f"Spotify {method} {path} returned status {response.status}",
                status_code=response.status,
            )
        return response

    async def play(self, token: str | None = None) -> None:
        await self._command("PUT", "/play", token, json={})

    async def pause(self, token: str | None = None) -> None:
        await self._command("PUT", "/pause", token, json={})

    async def skip_next(self, token: str | None = None) -> None:
        await self._command("POST", "/next", token, json={})

    async def skip_previous(self, token: str | None = None) -> None:
        await self._command("POST", "/previous", token, json={})

    async def set_volume(self, volume: int, token: str | None = None) -> None:
        """Set the volume, clamped to 0-100."""
        clamped = max(0, min(100, int(volume)))
        await self._command("PUT", "/volume", token, params={"volume_percent": clamped}, json={})

    async def transfer_to_device(
        self, device_id: str, play: bool = False, token: str | None = None
    ) -> None:
        """Move playback to ``device_id``."""
        await self._command("PUT", "", token, json={"device_ids": [device_id], "play": play})

    def health(self) -> SourceHealth:
        if not self.is_configured:
            return SourceHealth(status=HealthStatus.UNKNOWN, message="not configured")
        if self._session.is_authenticated or self._session.refresh_token:
            return SourceHealth(status=HealthStatus.HEALTHY)
        return SourceHealth(status=HealthStatus.UNKNOWN, message="Not authenticated")
