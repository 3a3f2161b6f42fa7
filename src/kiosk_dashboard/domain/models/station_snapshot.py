"""Bikeshare station snapshot domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StationSnapshot:
    """Availability at a single bikeshare station."""

    station_id: str
    name: str
    bikes: int
    docks: int
    ebikes: int
    scooters: int
    installed: bool
    renting: bool
