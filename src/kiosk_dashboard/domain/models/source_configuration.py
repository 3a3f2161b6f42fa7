"""Configured transit stops and bikeshare stations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TransitStopConfiguration:
    """A physical transit stop to monitor."""

    stop_id: str
    name: str


@dataclass(frozen=True)
class BikeStationConfiguration:
    """A bikeshare station to monitor."""

    station_id: str
    name: str
