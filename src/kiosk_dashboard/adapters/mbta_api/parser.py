"""Parsers for MBTA JSON:API documents."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from kiosk_dashboard.adapters.mbta_api.constants import SKIPPED_RELATIONSHIPS
from kiosk_dashboard.domain.errors import UpstreamMalformed
from kiosk_dashboard.domain.models.alert import Alert
from kiosk_dashboard.domain.models.data_source import DataSource
from kiosk_dashboard.domain.models.stop_prediction import OUTBOUND, StopPrediction

logger = logging.getLogger(__name__)


def _parse_time(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _related_id(resource: dict[str, Any], relation: str) -> str | None:
    data = (resource.get("relationships") or {}).get(relation, {}).get("data")
    return data.get("id") if isinstance(data, dict) else None


def _trip_headsigns(document: dict[str, Any]) -> dict[str, str]:
    """Map trip id to headsign from the document's included resources."""
    headsigns = {}
    for item in document.get("included") or []:
        if item.get("type") == "trip":
            headsign = (item.get("attributes") or {}).get("headsign")
            if headsign:
                headsigns[item["id"]] = headsign
    return headsigns


def _fallback_headsign(route_id: str | None, direction: int) -> str:
    label = "Outbound" if direction == OUTBOUND else "Inbound"
    return f"{route_id} {label}" if route_id else label


def parse_stop_predictions(
    document: Any, source: DataSource
) -> dict[str, list[StopPrediction]]:
    """Parse a predictions or schedules document into predictions per stop id.

    Args:
        document: Decoded JSON:API document.
        source: Tag for every parsed prediction (realtime or scheduled).

    Returns:
        Predictions keyed by stop id, in document order.

    Raises:
        UpstreamMalformed: The document does not have the expected shape.
    """
    if not isinstance(document, dict) or not isinstance(document.get("data"), list):
        raise UpstreamMalformed(f"Expected JSON:API document with a data list ({source})")

    headsigns = _trip_headsigns(document)
    by_stop: dict[str, list[StopPrediction]] = {}
    try:
        for resource in document["data"]:
            attributes = resource["attributes"]
            if attributes.get("schedule_relationship") in SKIPPED_RELATIONSHIPS:
                logger.debug(f"Skipping {resource.get('id')}: {attributes['schedule_relationship']}")
                continue

            arrival = _parse_time(attributes.get("arrival_time"))
            departure = _parse_time(attributes.get("departure_time"))
            if arrival is None and departure is None:
                continue

            stop_id = _related_id(resource, "stop")
            if stop_id is None:
                continue

            direction = int(attributes["direction_id"])
            trip_id = _related_id(resource, "trip")
            headsign = headsigns.get(trip_id or "") or _fallback_headsign(
                _related_id(resource, "route"), direction
            )
            by_stop.setdefault(stop_id, []).append(
                StopPrediction(
                    arrival_time=arrival,
                    departure_time=departure,
                    direction=direction,
                    headsign=headsign,
                    source=source,
                )
            )
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamMalformed(f"Unexpected {source} resource shape: {e!r}") from e

    return by_stop


def parse_alerts(document: Any) -> list[Alert]:
    """Parse an alerts document.

    Raises:
        UpstreamMalformed: The document does not have the expected shape.
    """
    if not isinstance(document, dict) or not isinstance(document.get("data"), list):
        raise UpstreamMalformed("Expected JSON:API document with a data list (alerts)")

    alerts = []
    try:
        for resource in document["data"]:
            attributes = resource["attributes"]
            alerts.append(
                Alert(
                    id=str(resource["id"]),
                    header=attributes.get("header") or "",
                    short_header=attributes.get("short_header") or "",
                    description=attributes.get("description") or "",
                    severity=int(attributes.get("severity") or 0),
                    effect=attributes.get("effect") or "",
                    service_effect=attributes.get("service_effect") or "",
                    timeframe=attributes.get("timeframe") or "",
                    banner=attributes.get("banner"),
                    url=attributes.get("url"),
                )
            )
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamMalformed(f"Unexpected alert resource shape: {e!r}") from e

    return alerts
