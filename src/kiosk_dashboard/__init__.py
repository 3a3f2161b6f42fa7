"""Kiosk dashboard backend: transit, bikeshare, weather and music in one snapshot."""
