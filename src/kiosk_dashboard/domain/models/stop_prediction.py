"""Stop prediction domain model."""

from dataclasses import dataclass
from datetime import datetime

from kiosk_dashboard.domain.models.data_source import DataSource

OUTBOUND = 0
INBOUND = 1


@dataclass(frozen=True)
class StopPrediction:
    """A single arrival estimate at a stop."""

    arrival_time: datetime | None
    departure_time: datetime | None
    direction: int  # 0 = outbound, 1 = inbound
    headsign: str
    source: DataSource

    @property
    def time(self) -> datetime:
        """Arrival time, falling back to departure time (first stop of a trip has no arrival)."""
        moment = self.arrival_time or self.departure_time
        if moment is None:
            raise ValueError("StopPrediction has neither arrival nor departure time")
        return moment
