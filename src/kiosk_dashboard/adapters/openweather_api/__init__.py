"""OpenWeatherMap adapters."""

from kiosk_dashboard.adapters.openweather_api.weather_service import WeatherService

__all__ = ["WeatherService"]
