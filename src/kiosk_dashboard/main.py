"""Main entry point for the kiosk dashboard application."""

import asyncio
import logging
import sys

import aiohttp

from kiosk_dashboard.adapters.api_rate_limiter import SlidingWindowRateLimiter
from kiosk_dashboard.adapters.cache import TtlCache
from kiosk_dashboard.adapters.config import AppConfig
from kiosk_dashboard.adapters.http_client import JsonHttpClient
from kiosk_dashboard.adapters.service_factory import build_dashboard_service
from kiosk_dashboard.adapters.spotify_api import SpotifyService
from kiosk_dashboard.adapters.web import DashboardWebAdapter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point."""
    config = AppConfig()

    for missing in config.missing_credentials():
        logger.warning(f"Missing credentials: {missing} (the affected source will stay empty)")

    cache = TtlCache()
    rate_limiter = SlidingWindowRateLimiter()
    timeout = aiohttp.ClientTimeout(total=config.http_timeout_seconds)

    async with aiohttp.ClientSession(timeout=timeout) as session:
        spotify = SpotifyService(
            http=JsonHttpClient(session, "Spotify API"),
            client_id=config.spotify_client_id,
            client_secret=config.spotify_client_secret,
            redirect_uri=config.spotify_redirect_uri,
        )
        try:
            dashboard = build_dashboard_service(config, session, cache, rate_limiter, spotify)
        except (ValueError, FileNotFoundError) as e:
            logger.error(f"Invalid source configuration: {e}")
            sys.exit(1)

        web_adapter = DashboardWebAdapter(dashboard, spotify, rate_limiter, config)
        try:
            await web_adapter.start()
        except KeyboardInterrupt:
            logger.info("Shutting down...")
            await web_adapter.stop()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
