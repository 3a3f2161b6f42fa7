"""Transit service alert domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Alert:
    """A service alert affecting the configured routes."""

    id: str
    header: str
    short_header: str
    description: str
    severity: int
    effect: str
    service_effect: str
    timeframe: str
    banner: str | None = None
    url: str | None = None
