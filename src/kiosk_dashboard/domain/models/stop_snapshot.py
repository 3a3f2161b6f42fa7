"""Stop snapshot domain model."""

from dataclasses import dataclass

from kiosk_dashboard.domain.models.data_source import DataSource
from kiosk_dashboard.domain.models.stop_prediction import StopPrediction


@dataclass(frozen=True)
class StopSnapshot:
    """Merged predictions for one configured physical stop."""

    stop_id: str
    stop_name: str
    predictions: tuple[StopPrediction, ...]
    data_source: DataSource
