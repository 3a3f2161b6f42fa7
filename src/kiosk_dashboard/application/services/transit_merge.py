"""Merge realtime and scheduled predictions into one ranked list per stop."""

from datetime import datetime, timedelta

from kiosk_dashboard.domain.models.data_source import DataSource
from kiosk_dashboard.domain.models.source_configuration import TransitStopConfiguration
from kiosk_dashboard.domain.models.stop_prediction import INBOUND, OUTBOUND, StopPrediction
from kiosk_dashboard.domain.models.stop_snapshot import StopSnapshot

MAX_PREDICTIONS_PER_DIRECTION = 2
DUPLICATE_WINDOW = timedelta(minutes=2)
DEFAULT_REALTIME_MAX_AGE = timedelta(minutes=30)


def drop_stale_realtime(
    predictions: list[StopPrediction], now: datetime, max_age: timedelta
) -> list[StopPrediction]:
    """Drop predictions whose time lies more than ``max_age`` before ``now``."""
    cutoff = now - max_age
    return [p for p in predictions if p.time >= cutoff]


def _is_duplicate(scheduled: StopPrediction, realtime: list[StopPrediction]) -> bool:
    """Return True if a realtime prediction is within the duplicate window of ``scheduled``."""
    return any(abs(scheduled.time - r.time) <= DUPLICATE_WINDOW for r in realtime)


def merge_direction(
    realtime: list[StopPrediction], scheduled: list[StopPrediction]
) -> list[StopPrediction]:
    """Merge predictions for a single direction.

    Realtime predictions win. Remaining slots are filled with scheduled predictions,
    skipping any that are likely the same physical train as an included realtime one.

    Args:
        realtime: Realtime predictions for the direction.
        scheduled: Scheduled predictions for the direction.

    Returns:
        At most two predictions, realtime first, each group in chronological order.
    """
    kept = sorted(realtime, key=lambda p: p.time)[:MAX_PREDICTIONS_PER_DIRECTION]
    if len(kept) >= MAX_PREDICTIONS_PER_DIRECTION:
        return kept

    fill = [p for p in sorted(scheduled, key=lambda p: p.time) if not _is_duplicate(p, kept)]
    return kept + fill[: MAX_PREDICTIONS_PER_DIRECTION - len(kept)]


def classify(predictions: list[StopPrediction]) -> DataSource:
    """Tag a stop by the sources of its included predictions."""
    sources = {p.source for p in predictions}
    if len(sources) > 1:
        return DataSource.MIXED
    if sources == {DataSource.SCHEDULED}:
        return DataSource.SCHEDULED
    return DataSource.REALTIME


def merge_stop_predictions(
    stop: TransitStopConfiguration,
    realtime: list[StopPrediction],
    scheduled: list[StopPrediction],
    now: datetime,
    realtime_max_age: timedelta = DEFAULT_REALTIME_MAX_AGE,
) -> StopSnapshot:
    """Combine realtime and scheduled predictions for one stop.

    Args:
        stop: The stop being merged.
        realtime: Realtime predictions at this stop (any direction, any order).
        scheduled: Scheduled predictions at this stop (any direction, any order).
        now: Fetch time, used to drop stale realtime predictions.
        realtime_max_age: How far in the past a realtime prediction may lie.

    Returns:
        A snapshot with at most two predictions per direction in chronological order.
    """
    fresh = drop_stale_realtime(realtime, now, realtime_max_age)

    merged: list[StopPrediction] = []
    for direction in (OUTBOUND, INBOUND):
        merged.extend(
            merge_direction(
                [p for p in fresh if p.direction == direction],
                [p for p in scheduled if p.direction == direction],
            )
        )
    merged.sort(key=lambda p: p.time)

    return StopSnapshot(
        stop_id=stop.stop_id,
        stop_name=stop.name,
        predictions=tuple(merged),
        data_source=classify(merged),
    )
