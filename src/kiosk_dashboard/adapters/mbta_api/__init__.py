"""MBTA v3 API adapters."""

from kiosk_dashboard.adapters.mbta_api.transit_service import TransitAlertsService, TransitService

__all__ = ["TransitAlertsService", "TransitService"]
