"""Cache entry domain model."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value with the time it was stored and its time-to-live."""

    value: T
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """Return True once ``ttl`` seconds have passed since ``stored_at``."""
        return now - self.stored_at >= self.ttl
