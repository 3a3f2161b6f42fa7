"""Transit stop and bikeshare station configuration loader."""

from typing import Any

from kiosk_dashboard.adapters.config.app_config import AppConfig
from kiosk_dashboard.domain.models.source_configuration import (
    BikeStationConfiguration,
    TransitStopConfiguration,
)

DEFAULT_TRANSIT_ROUTES = ["Green-C", "Green-D"]

DEFAULT_TRANSIT_STOPS = [
    TransitStopConfiguration(stop_id="70229", name="Washington Square (C Outbound)"),
    TransitStopConfiguration(stop_id="70230", name="Washington Square (C Inbound)"),
    TransitStopConfiguration(stop_id="70176", name="Beaconsfield (D Inbound)"),
    TransitStopConfiguration(stop_id="70177", name="Beaconsfield (D Outbound)"),
]

DEFAULT_BIKE_STATIONS = [
    BikeStationConfiguration(
        station_id="270ad97d-035d-472a-9827-76d3187afc56", name="Washington Sq"
    ),
    BikeStationConfiguration(
        station_id="510239fe-69c3-458b-b53c-6ce001845f4a", name="Washington St at Egremont Rd"
    ),
    BikeStationConfiguration(
        station_id="f8349ed6-0de8-11e7-991c-3863bb43a7d0", name="Beacon St at Tappan St"
    ),
    BikeStationConfiguration(
        station_id="f83494b4-0de8-11e7-991c-3863bb43a7d0", name="Coolidge Corner"
    ),
]


def _is_placeholder(identifier: str) -> bool:
    return "XXX" in identifier


def _table_list(table: dict[str, Any], key: str) -> list[Any] | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"TOML config '{key}' must be a list")
    return value


class SourceConfigurationLoader:
    """Loads transit and bikeshare source configuration from app config."""

    @staticmethod
    def load_transit_routes(config: AppConfig) -> list[str]:
        """Route ids from ``[transit] routes``."""
        routes = _table_list(config.load_toml_data().get("transit", {}), "routes")
        if routes is None:
            return list(DEFAULT_TRANSIT_ROUTES)
        return [str(route) for route in routes if route]

    @staticmethod
    def load_transit_stops(config: AppConfig) -> list[TransitStopConfiguration]:
        """Stops from ``[[transit.stops]]`` (``stop_id``, ``name``)."""
        stops_data = _table_list(config.load_toml_data().get("transit", {}), "stops")
        if stops_data is None:
            return list(DEFAULT_TRANSIT_STOPS)

        stops: list[TransitStopConfiguration] = []
        for stop_data in stops_data:
            if not isinstance(stop_data, dict):
                continue
            stop_id = str(stop_data.get("stop_id") or "")
            if not stop_id or _is_placeholder(stop_id):
                continue
            stops.append(
                TransitStopConfiguration(stop_id=stop_id, name=str(stop_data.get("name") or stop_id))
            )
        return stops

    @staticmethod
    def load_bike_stations(config: AppConfig) -> list[BikeStationConfiguration]:
        """Stations from ``[[bikeshare.stations]]`` (``station_id``, ``name``)."""
        stations_data = _table_list(config.load_toml_data().get("bikeshare", {}), "stations")
        if stations_data is None:
            return list(DEFAULT_BIKE_STATIONS)

        stations: list[BikeStationConfiguration] = []
        for station_data in stations_data:
            if not isinstance(station_data, dict):
                continue
            station_id = str(station_data.get("station_id") or "")
            if not station_id or _is_placeholder(station_id):
                continue
            stations.append(
                BikeStationConfiguration(
                    station_id=station_id, name=str(station_data.get("name") or station_id)
                )
            )
        return stations
