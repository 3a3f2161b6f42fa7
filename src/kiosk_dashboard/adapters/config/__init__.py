"""Configuration adapters."""

from kiosk_dashboard.adapters.config.app_config import AppConfig
from kiosk_dashboard.adapters.config.source_configuration_loader import SourceConfigurationLoader

__all__ = ["AppConfig", "SourceConfigurationLoader"]
