"""In-memory cache adapters."""

from kiosk_dashboard.adapters.cache.ttl_cache import CacheKeys, TtlCache

__all__ = ["CacheKeys", "TtlCache"]
