"""Data source tag for transit predictions."""

from enum import StrEnum


class DataSource(StrEnum):
    """Where a prediction (or a whole stop snapshot) came from."""

    REALTIME = "realtime"
    SCHEDULED = "scheduled"
    MIXED = "mixed"
    CACHED = "cached"
