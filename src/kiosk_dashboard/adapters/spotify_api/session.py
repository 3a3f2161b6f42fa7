"""Server-side Spotify credential state."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Treat tokens as expired slightly early so in-flight requests don't race the expiry
EXPIRY_MARGIN_SECONDS = 30.0


class SpotifySession:
    """Holds the bearer credential for the music account.

    Owned by SpotifyService; ephemeral credential state, never cached data.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize an empty session.

        Args:
            clock: Wall clock in seconds (injectable for tests).
        """
        self._clock = clock
        self._access_token: str | None = None
        self._refresh_token: str | None = None
        self._expires_at: float = 0.0

    def update(
        self, access_token: str, expires_in: float, refresh_token: str | None = None
    ) -> None:
        """Store a new access token, keeping the previous refresh token unless replaced."""
        self._access_token = access_token
        self._expires_at = self._clock() + expires_in
        if refresh_token:
            self._refresh_token = refresh_token
        logger.info(f"Spotify session updated, expires in {int(expires_in)}s")

    def clear(self) -> None:
        """Forget all credentials; re-authorization is required afterwards."""
        self._access_token = None
        self._refresh_token = None
        self._expires_at = 0.0
        logger.info("Spotify session cleared")

    @property
    def access_token(self) -> str | None:
        """The access token, or None if absent or expired."""
        if self._access_token and self._clock() < self._expires_at - EXPIRY_MARGIN_SECONDS:
            return self._access_token
        return None

    @property
    def refresh_token(self) -> str | None:
        return self._refresh_token

    @property
    def expires_at(self) -> float:
        return self._expires_at

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None
