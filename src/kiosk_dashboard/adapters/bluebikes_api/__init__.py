"""Bluebikes GBFS feed adapters."""

from kiosk_dashboard.adapters.bluebikes_api.bikeshare_service import BikeshareService

__all__ = ["BikeshareService"]
