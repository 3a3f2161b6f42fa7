"""Protocol for the key/value cache with per-entry expiry."""

from typing import Any, Protocol


class CacheProtocol(Protocol):
    """Protocol for a process-wide TTL cache."""

    def get(self, key: str) -> Any | None:
        """Get a fresh value.

        Args:
            key: Cache key.

        Returns:
            The cached value, or None if absent or expired.
        """
        ...

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value, overwriting any prior entry.

        Args:
            key: Cache key.
            value: Value to store (never None).
            ttl_seconds: Seconds until the entry expires.
        """
        ...

    def has(self, key: str) -> bool:
        """Return True if a fresh value is stored under ``key``."""
        ...
