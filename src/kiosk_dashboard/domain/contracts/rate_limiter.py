"""Protocol for request rate limiting."""

from typing import Protocol


class RateLimiterProtocol(Protocol):
    """Protocol for a per-key request admission check."""

    def allow(self, key: str, window_seconds: float, max_requests: int) -> bool:
        """Admit and record a request under ``key`` if the window has capacity.

        Args:
            key: Name of the limited resource.
            window_seconds: Length of the trailing window.
            max_requests: Maximum admitted requests within the window.

        Returns:
            True if admitted, False if denied (nothing recorded).
        """
        ...
