"""Cache, rate-limit, fetch, degrade-to-stale policy shared by all data sources."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

from kiosk_dashboard.domain.errors import (
    NotConfigured,
    RateLimited,
    UpstreamMalformed,
    UpstreamUnavailable,
)
from kiosk_dashboard.domain.models.source_health import HealthStatus, SourceHealth

if TYPE_CHECKING:
    from kiosk_dashboard.domain.contracts.cache import CacheProtocol
    from kiosk_dashboard.domain.contracts.rate_limiter import RateLimiterProtocol
    from kiosk_dashboard.domain.models.rate_limit_policy import RateLimitPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CachedSource(ABC, Generic[T]):
    """Base class for a data source wrapping one upstream.

    ``fetch()`` never raises for upstream faults and never retries: a failed cycle
    serves the last known good value (or ``default()``) and waits for the next poll.
    """

    name: str
    cache_key: str

    def __init__(
        self,
        cache: CacheProtocol,
        rate_limiter: RateLimiterProtocol,
        policy: RateLimitPolicy,
        ttl_seconds: float,
    ) -> None:
        """Initialize the source.

        Args:
            cache: Shared TTL cache.
            rate_limiter: Shared rate limiter.
            policy: Rate limit policy for this upstream.
            ttl_seconds: How long a successful result stays fresh.
        """
        self._cache = cache
        self._rate_limiter = rate_limiter
        self.policy = policy
        self.ttl_seconds = ttl_seconds
        self._last_good: T | None = None
        self._health = SourceHealth(status=HealthStatus.UNKNOWN, message="Not fetched yet")

    @abstractmethod
    async def _fetch_upstream(self) -> T:
        """Call the upstream API and normalize the response.

        Raises:
            NotConfigured: A required credential is missing.
            UpstreamUnavailable: Network failure or non-2xx response.
            UpstreamMalformed: Unexpected body shape.
        """

    @abstractmethod
    def default(self) -> T:
        """Neutral value served when nothing better is available."""

    def _as_stale(self, value: T) -> T:
        """Mark a last known good value as served from cache."""
        return value

    def health(self) -> SourceHealth:
        """Report the outcome of the most recent fetch."""
        return self._health

    def _degrade(self, reason: str) -> T:
        """Serve the last known good value, else the neutral default."""
        self._health = SourceHealth(status=HealthStatus.DEGRADED, message=reason)
        if self._last_good is not None:
            logger.info(f"{self.name}: serving stale data ({reason})")
            return self._as_stale(self._last_good)
        logger.info(f"{self.name}: no cached data, serving empty default ({reason})")
        return self.default()

    async def fetch(self) -> T:
        """Return cached data, fresh upstream data, or degraded fallback data."""
        cached = self._cache.get(self.cache_key)
        if cached is not None:
            self._health = SourceHealth(status=HealthStatus.HEALTHY)
            return cached  # type: ignore[no-any-return]

        if not self._rate_limiter.allow(
            self.policy.key, self.policy.window_seconds, self.policy.max_requests
        ):
            logger.warning(f"{self.name}: rate limit exceeded, using cached data")
            return self._degrade("Rate limited")

        try:
            value = await self._fetch_upstream()
        except NotConfigured as e:
            logger.warning(f"{self.name}: {e}")
            self._health = SourceHealth(status=HealthStatus.UNKNOWN, message=str(e))
            return self.default()
        except UpstreamUnavailable as e:
            logger.error(f"{self.name}: upstream unavailable (status: {e.status_code}): {e}")
            return self._degrade("Upstream unavailable")
        except UpstreamMalformed as e:
            logger.error(f"{self.name}: malformed upstream response: {e}")
            return self._degrade("Malformed upstream response")
        except RateLimited as e:
            logger.warning(f"{self.name}: throttled: {e}")
            return self._degrade("Rate limited")
        except Exception as e:
            # Isolate this source; the aggregate must still be assembled
            logger.error(f"{self.name}: unexpected error while fetching: {e}", exc_info=True)
            return self._degrade("Unexpected error")

        if value is not None:
            self._cache.set(self.cache_key, value, self.ttl_seconds)
            self._last_good = value
        self._health = SourceHealth(status=HealthStatus.HEALTHY)
        return value
