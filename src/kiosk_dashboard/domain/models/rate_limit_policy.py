"""Rate limit policy domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitPolicy:
    """At most ``max_requests`` under ``key`` within any ``window_seconds`` interval."""

    key: str
    window_seconds: float
    max_requests: int
