"""Process-wide TTL cache implementation."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from kiosk_dashboard.domain.contracts.cache import CacheProtocol
from kiosk_dashboard.domain.models.cache_entry import CacheEntry

logger = logging.getLogger(__name__)


class CacheKeys:
    """One key per logical dataset."""

    TRANSIT = "transit"
    TRANSIT_ALERTS = "transit_alerts"
    BIKESHARE = "bikeshare"
    WEATHER = "weather"
    DASHBOARD = "dashboard"


class TtlCache(CacheProtocol):
    """In-memory key/value store with per-entry expiry.

    No capacity bound; expired entries are removed lazily when read.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the cache.

        Args:
            clock: Monotonic clock in seconds (injectable for tests).
        """
        self._clock = clock
        self._store: dict[str, CacheEntry[Any]] = {}

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``, replacing any prior entry."""
        if value is None:
            raise ValueError("None cannot be cached; absence is represented by None")
        self._store[key] = CacheEntry(value=value, stored_at=self._clock(), ttl=ttl_seconds)

    def get(self, key: str) -> Any | None:
        """Return the value under ``key`` if present and fresh, evicting it if expired."""
        entry = self._store.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._store[key]
            logger.debug(f"Cache entry '{key}' expired")
            return None

        return entry.value

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
