"""Starlette application exposing the dashboard snapshot and music controls."""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from pydantic import TypeAdapter
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from kiosk_dashboard.domain.errors import (
    DashboardError,
    NotConfigured,
    Unauthenticated,
)
from kiosk_dashboard.domain.models.dashboard_snapshot import DashboardSnapshot
from kiosk_dashboard.domain.models.playback_state import PlaybackDevice, PlaybackState

if TYPE_CHECKING:
    from kiosk_dashboard.adapters.spotify_api import SpotifyService
    from kiosk_dashboard.application.services import DashboardService

logger = logging.getLogger(__name__)

Handler = Callable[[Request], Awaitable[Response]]

_snapshot_adapter = TypeAdapter(DashboardSnapshot)
_playback_adapter = TypeAdapter(PlaybackState)
_devices_adapter = TypeAdapter(list[PlaybackDevice])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def json_errors(failure_message: str) -> Callable[[Handler], Handler]:
    """Map dashboard errors raised by a handler to JSON error responses."""

    def decorator(handler: Handler) -> Handler:
        @functools.wraps(handler)
        async def wrapper(request: Request) -> Response:
            try:
                return await handler(request)
            except Unauthenticated:
                return _error("Not authenticated", 401)
            except NotConfigured as e:
                return _error(str(e), 503)
            except DashboardError as e:
                logger.warning(f"{request.url.path}: {e}")
                return _error(failure_message, 502)
            except Exception as e:
                logger.error(f"{request.url.path}: {e}", exc_info=True)
                return _error(failure_message, 500)

        return wrapper

    return decorator


async def _json_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def create_app(dashboard_service: DashboardService, spotify_service: SpotifyService) -> Starlette:
    """Build the Starlette application.

    Args:
        dashboard_service: Aggregator serving snapshots and source health.
        spotify_service: Music integration holding the server-side credential.
    """

    @json_errors("Failed to fetch dashboard data")
    async def dashboard(_request: Request) -> Response:
        snapshot = await dashboard_service.fetch()
        return JSONResponse(_snapshot_adapter.dump_python(snapshot, mode="json"))

    @json_errors("Failed to fetch system status")
    async def status(_request: Request) -> Response:
        services = {
            name: health.model_dump(mode="json")
            for name, health in dashboard_service.source_health().items()
        }
        return JSONResponse(
            {
                "status": "healthy",
                "timestamp": datetime.now(UTC).isoformat(),
                "services": services,
            }
        )

    async def spotify_auth(_request: Request) -> Response:
        try:
            return RedirectResponse(spotify_service.authorization_url(), status_code=302)
        except NotConfigured as e:
            return _error(str(e), 503)

    async def spotify_callback(request: Request) -> Response:
        error = request.query_params.get("error")
        if error:
            return RedirectResponse(f"/?{urlencode({'spotify_error': error})}", status_code=302)

        code = request.query_params.get("code")
        if not code:
            return RedirectResponse("/?spotify_error=no_code", status_code=302)

        try:
            await spotify_service.exchange_code(code)
        except DashboardError as e:
            logger.error(f"Spotify callback failed: {e}")
            return RedirectResponse("/?spotify_error=callback_failed", status_code=302)
        return RedirectResponse("/?spotify_connected=true", status_code=302)

    @json_errors("Failed to fetch player state")
    async def player_state(_request: Request) -> Response:
        state = await spotify_service.get_playback_state()
        if not state.is_authenticated:
            return _error("Not authenticated", 401)
        return JSONResponse(_playback_adapter.dump_python(state, mode="json"))

    @json_errors("Failed to control playback")
    async def player_control(request: Request) -> Response:
        action = (await _json_body(request)).get("action")
        if action == "play":
            await spotify_service.play()
        elif action == "pause":
            await spotify_service.pause()
        else:
            return _error("Invalid action", 400)
        return JSONResponse({"success": True})

    @json_errors("Failed to skip to next track")
    async def player_next(_request: Request) -> Response:
        await spotify_service.skip_next()
        return JSONResponse({"success": True})

    @json_errors("Failed to skip to previous track")
    async def player_previous(_request: Request) -> Response:
        await spotify_service.skip_previous()
        return JSONResponse({"success": True})

    @json_errors("Failed to set volume")
    async def player_volume(request: Request) -> Response:
        volume = (await _json_body(request)).get("volume")
        if isinstance(volume, bool) or not isinstance(volume, (int, float)):
            return _error("Invalid volume", 400)
        await spotify_service.set_volume(int(volume))
        return JSONResponse({"success": True})

    @json_errors("Failed to fetch devices")
    async def devices(_request: Request) -> Response:
        found = await spotify_service.get_devices()
        return JSONResponse({"devices": _devices_adapter.dump_python(found, mode="json")})

    @json_errors("Failed to transfer playback")
    async def transfer(request: Request) -> Response:
        body = await _json_body(request)
        device_id = body.get("deviceId")
        if not device_id or not isinstance(device_id, str):
            return _error("Device ID is required", 400)
        await spotify_service.transfer_to_device(device_id, play=bool(body.get("play", False)))
        return JSONResponse({"success": True})

    async def healthz(_request: Request) -> Response:
        """Health check endpoint for load balancers and monitoring."""
        return Response(content="Ok", media_type="text/plain")

    routes = [
        Route("/api/dashboard", dashboard, methods=["GET"]),
        Route("/api/status", status, methods=["GET"]),
        Route("/api/spotify/auth", spotify_auth, methods=["GET"]),
        Route("/api/spotify/callback", spotify_callback, methods=["GET"]),
        Route("/api/spotify/player", player_state, methods=["GET"]),
        Route("/api/spotify/player", player_control, methods=["POST"]),
        Route("/api/spotify/player/next", player_next, methods=["POST"]),
        Route("/api/spotify/player/previous", player_previous, methods=["POST"]),
        Route("/api/spotify/player/volume", player_volume, methods=["POST"]),
        Route("/api/spotify/devices", devices, methods=["GET"]),
        Route("/api/spotify/transfer", transfer, methods=["POST"]),
        Route("/healthz", healthz, methods=["GET"]),
    ]
    return Starlette(routes=routes)
