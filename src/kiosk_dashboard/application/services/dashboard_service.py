"""Aggregator that fans out to all enabled sources and assembles one snapshot."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from kiosk_dashboard.application.services.cached_source import CachedSource
from kiosk_dashboard.domain.models.dashboard_snapshot import DashboardSnapshot
from kiosk_dashboard.domain.models.source_health import HealthStatus, SourceHealth

if TYPE_CHECKING:
    from kiosk_dashboard.domain.contracts.cache import CacheProtocol
    from kiosk_dashboard.domain.contracts.data_source import DataSourceProtocol
    from kiosk_dashboard.domain.contracts.rate_limiter import RateLimiterProtocol
    from kiosk_dashboard.domain.models.alert import Alert
    from kiosk_dashboard.domain.models.rate_limit_policy import RateLimitPolicy
    from kiosk_dashboard.domain.models.station_snapshot import StationSnapshot
    from kiosk_dashboard.domain.models.stop_snapshot import StopSnapshot
    from kiosk_dashboard.domain.models.weather_snapshot import WeatherSnapshot

logger = logging.getLogger(__name__)

DISABLED = SourceHealth(status=HealthStatus.UNKNOWN, message="disabled")


class DashboardService(CachedSource[DashboardSnapshot]):
    """Builds the dashboard snapshot from independently constructed sources.

    A source passed as None is disabled: it is left out of the fan-out and its
    field stays empty in the snapshot.
    """

    name = "dashboard"
    cache_key = "dashboard"

    def __init__(
        self,
        cache: CacheProtocol,
        rate_limiter: RateLimiterProtocol,
        policy: RateLimitPolicy,
        ttl_seconds: float,
        transit: DataSourceProtocol[list[StopSnapshot]] | None = None,
        alerts: DataSourceProtocol[list[Alert]] | None = None,
        bikes: DataSourceProtocol[list[StationSnapshot]] | None = None,
        weather: DataSourceProtocol[WeatherSnapshot | None] | None = None,
        music: Any | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            cache: Shared TTL cache.
            rate_limiter: Shared rate limiter.
            policy: Rate limit policy for snapshot assembly.
            ttl_seconds: How long an assembled snapshot stays fresh.
            transit: Transit prediction source, or None when disabled.
            alerts: Transit alert source, or None when disabled.
            bikes: Bikeshare source, or None when disabled.
            weather: Weather source, or None when disabled.
            music: Music service, only consulted for health reporting.
        """
        super().__init__(cache, rate_limiter, policy, ttl_seconds)
        self._sources: dict[str, DataSourceProtocol[Any] | None] = {
            "transit": transit,
            "alerts": alerts,
            "bikes": bikes,
            "weather": weather,
        }
        self._music = music
        self._active_alerts: tuple[Alert, ...] = ()

    def default(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            transit=(),
            bikes=(),
            weather=None,
            alerts=(),
            generated_at=datetime.now(UTC),
        )

    async def _fetch_upstream(self) -> DashboardSnapshot:
        enabled = {field: source for field, source in self._sources.items() if source is not None}
        results = await asyncio.gather(
            *(source.fetch() for source in enabled.values()), return_exceptions=True
        )

        values: dict[str, Any] = {}
        for (field, source), result in zip(enabled.items(), results, strict=True):
            if isinstance(result, BaseException):
                logger.error(f"Source {source.name} failed during fan-out: {result}")
                continue
            values[field] = result

        if "alerts" in values:
            self._active_alerts = tuple(values["alerts"])

        return DashboardSnapshot(
            transit=tuple(values.get("transit") or ()),
            bikes=tuple(values.get("bikes") or ()),
            weather=values.get("weather"),
            alerts=tuple(values.get("alerts") or ()),
            generated_at=datetime.now(UTC),
        )

    def source_health(self) -> dict[str, SourceHealth]:
        """Per-source health for status reporting.

        A healthy transit source is reported degraded while alerts are active,
        with the first alert header as the message.
        """
        report = {
            field: source.health() if source is not None else DISABLED
            for field, source in self._sources.items()
        }
        report["music"] = self._music.health() if self._music is not None else DISABLED
        if self._active_alerts and report["transit"].status == HealthStatus.HEALTHY:
            report["transit"] = SourceHealth(
                status=HealthStatus.DEGRADED, message=self._active_alerts[0].header
            )
        return report
