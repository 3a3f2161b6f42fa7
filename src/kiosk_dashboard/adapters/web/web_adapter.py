"""Web adapter serving the dashboard API with uvicorn."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import uvicorn

from kiosk_dashboard.adapters.web.app import create_app
from kiosk_dashboard.adapters.web.rate_limit_middleware import RateLimitMiddleware

if TYPE_CHECKING:
    from kiosk_dashboard.adapters.api_rate_limiter import SlidingWindowRateLimiter
    from kiosk_dashboard.adapters.config import AppConfig
    from kiosk_dashboard.adapters.spotify_api import SpotifyService
    from kiosk_dashboard.application.services import DashboardService

logger = logging.getLogger(__name__)


class DashboardWebAdapter:
    """Runs the HTTP server and the background work it depends on."""

    def __init__(
        self,
        dashboard_service: DashboardService,
        spotify_service: SpotifyService,
        rate_limiter: SlidingWindowRateLimiter,
        config: AppConfig,
    ) -> None:
        """Initialize the web adapter.

        Args:
            dashboard_service: Aggregator serving snapshots and source health.
            spotify_service: Music integration.
            rate_limiter: Outgoing rate limiter whose sweep runs alongside the server.
            config: Application configuration.
        """
        self.dashboard_service = dashboard_service
        self.spotify_service = spotify_service
        self.rate_limiter = rate_limiter
        self.config = config
        self._server: uvicorn.Server | None = None

    def build_app(self) -> Any:
        """Starlette app wrapped with per-IP rate limiting."""
        app = create_app(self.dashboard_service, self.spotify_service)
        return RateLimitMiddleware(app, requests_per_minute=self.config.rate_limit_per_minute)

    async def start(self) -> None:
        """Start the limiter sweep and serve until the server exits."""
        await self.rate_limiter.start()

        config = uvicorn.Config(
            self.build_app(),
            host=self.config.host,
            port=self.config.port,
            log_level="info",
        )
        self._server = uvicorn.Server(config)
        logger.info(f"Serving dashboard on http://{self.config.host}:{self.config.port}")
        try:
            await self._server.serve()
        finally:
            await self.rate_limiter.stop()

    async def stop(self) -> None:
        """Stop the web server and the limiter sweep."""
        await self.rate_limiter.stop()
        if self._server:
            self._server.should_exit = True
