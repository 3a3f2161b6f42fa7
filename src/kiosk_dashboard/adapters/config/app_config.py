"""12-factor configuration adapter using environment variables and TOML config."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kiosk_dashboard.domain.models.rate_limit_policy import RateLimitPolicy


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    _toml_data: dict[str, Any] | None = PrivateAttr(default=None)

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the server to")
    port: int = Field(default=8000, description="Port to bind the server to")
    rate_limit_per_minute: int = Field(
        default=100,
        description="Maximum number of requests allowed per IP address per minute",
    )

    # Feature flags
    enable_mbta: bool = Field(default=True, description="Fetch MBTA predictions and alerts")
    enable_bluebikes: bool = Field(default=True, description="Fetch Bluebikes availability")
    enable_weather: bool = Field(default=False, description="Fetch OpenWeatherMap conditions")

    # Credentials
    mbta_api_key: str | None = Field(default=None, description="MBTA v3 API key")
    openweather_api_key: str | None = Field(default=None, description="OpenWeatherMap API key")
    spotify_client_id: str | None = Field(default=None, description="Spotify OAuth client id")
    spotify_client_secret: str | None = Field(
        default=None, description="Spotify OAuth client secret"
    )
    spotify_redirect_uri: str | None = Field(
        default=None, description="Spotify OAuth redirect URI (e.g. http://host/api/spotify/callback)"
    )

    # Upstream access
    http_timeout_seconds: float = Field(
        default=10, description="Total timeout for upstream HTTP requests in seconds"
    )
    latitude: float = Field(default=42.3318, description="Weather location latitude")
    longitude: float = Field(default=-71.1212, description="Weather location longitude")

    # Cache freshness
    transit_ttl_seconds: float = Field(default=15, description="Freshness of predictions")
    alerts_ttl_seconds: float = Field(default=600, description="Freshness of service alerts")
    bikeshare_ttl_seconds: float = Field(default=30, description="Freshness of bike availability")
    weather_ttl_seconds: float = Field(default=300, description="Freshness of weather")
    dashboard_ttl_seconds: float = Field(default=10, description="Freshness of the snapshot")

    # Outgoing rate limits: at most N requests per window
    mbta_rate_limit_window_seconds: float = Field(default=1)
    mbta_rate_limit_max_requests: int = Field(default=10)
    alerts_rate_limit_window_seconds: float = Field(default=60)
    alerts_rate_limit_max_requests: int = Field(default=5)
    bikeshare_rate_limit_window_seconds: float = Field(default=60)
    bikeshare_rate_limit_max_requests: int = Field(default=30)
    weather_rate_limit_window_seconds: float = Field(default=60)
    weather_rate_limit_max_requests: int = Field(default=60)
    dashboard_rate_limit_window_seconds: float = Field(default=1)
    dashboard_rate_limit_max_requests: int = Field(default=5)

    transit_realtime_max_age_minutes: float = Field(
        default=30,
        description="Realtime predictions older than this many minutes are dropped",
    )

    # TOML config file path (stops, routes and stations). Built-in defaults when unset.
    config_file: str | None = Field(
        default=None,
        description="Path to TOML configuration file for transit stops and bikeshare stations",
    )

    @field_validator(
        "transit_ttl_seconds",
        "alerts_ttl_seconds",
        "bikeshare_ttl_seconds",
        "weather_ttl_seconds",
        "dashboard_ttl_seconds",
        "http_timeout_seconds",
        "transit_realtime_max_age_minutes",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate durations are positive."""
        if v <= 0:
            raise ValueError("durations must be positive")
        return v

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, v: float) -> float:
        if not -90 <= v <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return v

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, v: float) -> float:
        if not -180 <= v <= 180:
            raise ValueError("longitude must be between -180 and 180")
        return v

    def load_toml_data(self) -> dict[str, Any]:
        """Parsed TOML file, or an empty table when none is set.

        The file is read on first use only.
        """
        if self._toml_data is not None:
            return self._toml_data
        if not self.config_file:
            return {}

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            self._toml_data = tomllib.load(f)
        return self._toml_data

    def rate_limit_policy(self, source: str) -> RateLimitPolicy:
        """Outgoing rate limit policy for ``source`` (mbta, alerts, bikeshare, weather, dashboard)."""
        return RateLimitPolicy(
            key=f"{source}_api",
            window_seconds=getattr(self, f"{source}_rate_limit_window_seconds"),
            max_requests=getattr(self, f"{source}_rate_limit_max_requests"),
        )

    def missing_credentials(self) -> list[str]:
        """Names of enabled sources that lack the credentials they need."""
        missing = []
        if self.enable_mbta and not self.mbta_api_key:
            missing.append("MBTA_API_KEY")
        if self.enable_weather and not self.openweather_api_key:
            missing.append("OPENWEATHER_API_KEY")
        if not (
            self.spotify_client_id and self.spotify_client_secret and self.spotify_redirect_uri
        ):
            missing.append("SPOTIFY_CLIENT_ID/SPOTIFY_CLIENT_SECRET/SPOTIFY_REDIRECT_URI")
        return missing
