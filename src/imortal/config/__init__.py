"""Configuration module for Immortal Engine."""

from imortal.config.logging import configure_logging, get_logger
from imortal.config.settings import Settings, get_settings

__all__ = ["Settings", "configure_logging", "get_logger", "get_settings"]
