"""Spotify Web API adapters."""

from kiosk_dashboard.adapters.spotify_api.session import SpotifySession
from kiosk_dashboard.adapters.spotify_api.spotify_service import SpotifyService

__all__ = ["SpotifyService", "SpotifySession"]
