"""Error taxonomy for upstream integrations.

Transient faults (``UpstreamUnavailable``, ``UpstreamMalformed``, ``RateLimited``)
are absorbed by the cached source policy and never reach the presentation layer.
``Unauthenticated`` and ``NotConfigured`` describe expected, user-actionable
conditions and are reported as state instead.
"""


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class UpstreamUnavailable(DashboardError):
    """Network failure, timeout, or non-2xx response from an upstream API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamMalformed(DashboardError):
    """Upstream answered, but not with the body shape we expect."""


class RateLimited(DashboardError):
    """The local throttle denied the request."""


class Unauthenticated(DashboardError):
    """No valid credential is held for an upstream that requires one."""


class NotConfigured(DashboardError):
    """A required API key or setting is missing."""
