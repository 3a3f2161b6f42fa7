"""Source health domain model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class HealthStatus(StrEnum):
    """Coarse health of a data source."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNKNOWN = "unknown"


class SourceHealth(BaseModel):
    """Health of a data source, with an optional human-readable reason."""

    model_config = ConfigDict(frozen=True)

    status: HealthStatus
    message: str | None = None
