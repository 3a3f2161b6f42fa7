"""Protocols (contracts) between the application and adapter layers."""

from kiosk_dashboard.domain.contracts.cache import CacheProtocol
from kiosk_dashboard.domain.contracts.data_source import DataSourceProtocol
from kiosk_dashboard.domain.contracts.rate_limiter import RateLimiterProtocol

__all__ = ["CacheProtocol", "DataSourceProtocol", "RateLimiterProtocol"]
