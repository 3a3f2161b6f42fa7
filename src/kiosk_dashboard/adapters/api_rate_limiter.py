"""Rate limiter for outgoing API requests.

Sliding-window request log per named resource: a request is admitted iff fewer
than ``max_requests`` timestamps for its key fall within the trailing window.
A background sweep bounds memory independent of call volume.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING

from kiosk_dashboard.domain.contracts.rate_limiter import RateLimiterProtocol

if TYPE_CHECKING:
    from kiosk_dashboard.domain.models.rate_limit_policy import RateLimitPolicy

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 60.0
RETENTION_SECONDS = 60.0


class SlidingWindowRateLimiter(RateLimiterProtocol):
    """Per-key sliding window rate limiter.

    Single event loop only: ``allow`` never awaits, so no lock is needed.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        retention_seconds: float = RETENTION_SECONDS,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            clock: Monotonic clock in seconds (injectable for tests).
            sweep_interval_seconds: Seconds between background sweeps.
            retention_seconds: Timestamps older than this are dropped by a sweep.
        """
        self._clock = clock
        self.sweep_interval_seconds = sweep_interval_seconds
        self.retention_seconds = retention_seconds
        self._windows: dict[str, deque[float]] = {}
        self._window_lengths: dict[str, float] = {}
        self._task: asyncio.Task | None = None

    def allow(self, key: str, window_seconds: float, max_requests: int) -> bool:
        """Admit and record a request under ``key`` if the window has capacity.

        Args:
            key: Name of the limited resource.
            window_seconds: Length of the trailing window in seconds.
            max_requests: Maximum admitted requests within the window.

        Returns:
            True if admitted, False if denied.
        """
        now = self._clock()
        timestamps = self._windows.setdefault(key, deque())
        self._window_lengths[key] = max(self._window_lengths.get(key, 0.0), window_seconds)
        window_start = now - window_seconds
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= max_requests:
            logger.debug(f"{key}: denied ({len(timestamps)}/{max_requests} in {window_seconds}s)")
            return False

        timestamps.append(now)
        return True

    def allow_policy(self, policy: RateLimitPolicy) -> bool:
        """Admit a request according to ``policy``."""
        return self.allow(policy.key, policy.window_seconds, policy.max_requests)

    def count(self, key: str) -> int:
        """Number of retained timestamps under ``key``."""
        return len(self._windows.get(key, ()))

    def keys(self) -> set[str]:
        return set(self._windows.keys())

    def sweep(self) -> None:
        """Drop timestamps older than the retention period and forget empty keys.

        A key keeps at least its longest admitted window of history.
        """
        now = self._clock()
        for key in list(self._windows):
            timestamps = self._windows[key]
            cutoff = now - max(self.retention_seconds, self._window_lengths.get(key, 0.0))
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()
            if not timestamps:
                del self._windows[key]
                self._window_lengths.pop(key, None)

    async def start(self) -> None:
        """Start the background sweep."""
        if self._task is not None and not self._task.done():
            logger.warning("Rate limiter sweep already running")
            return

        self._task = asyncio.create_task(self._sweep_loop())
        logger.info(f"Started rate limiter sweep every {self.sweep_interval_seconds}s")

    async def stop(self) -> None:
        """Stop the background sweep."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.info("Rate limiter sweep cancelled")
            logger.info("Stopped rate limiter sweep")
        self._task = None

    async def _sweep_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.sweep_interval_seconds)
                self.sweep()
        except asyncio.CancelledError:
            logger.debug("Rate limiter sweep loop cancelled")
            raise
