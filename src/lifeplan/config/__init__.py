"""Configuration management."""

from lifeplan.config.settings import (
    Settings,
    configure_logging,
    get_settings,
    reload_settings,
)

__all__ = ["Settings", "configure_logging", "get_settings", "reload_settings"]
