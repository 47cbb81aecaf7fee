"""Configuration management for storage monitor."""

from .config_manager import ConfigManager, MonitorSettings
from .config_validator import ConfigValidator

__all__ = ["ConfigManager", "ConfigValidator", "MonitorSettings"]
