"""Configuration management for the storage monitor."""

import copy
import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .config_validator import ConfigValidator
from ..core.exceptions import ConfigurationError
from ..core.models import MonitoredPath, ThresholdKind


@dataclass(frozen=True)
class MonitorSettings:
    """Immutable view of the settings one monitor iteration works from."""
    enabled: bool = False
    paths: Tuple[MonitoredPath, ...] = ()
    check_interval_seconds: float = 3600.0
    idle_poll_seconds: float = 10.0
    alerts_enabled: bool = False
    custom_message: Optional[str] = None


class ConfigManager:
    """Thread-safe handle on the storage monitor configuration.

    One instance is created at startup and shared by reference between the
    threshold monitor and any request handlers. Readers take snapshots; the
    lock is never held across a scan or a notification.
    """

    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.expanduser("~/.storage-monitor/config.yaml"),
        os.path.expanduser("~/.storage-monitor/config.yml"),
        "/etc/storage-monitor/config.yaml",
        "/etc/storage-monitor/config.yml"
    ]

    DEFAULTS = {
        'monitoring': {
            'enabled': False,
            'check_interval_minutes': 60,
            'idle_poll_seconds': 10,
            'max_workers': None,
            'paths': [
                {'path': '/', 'threshold_type': 'max_used', 'threshold_value': 100.0}
            ]
        },
        'alerts': {
            'enabled': False,
            'custom_message': None,
            'subject': 'Storage Monitor Alert'
        },
        'logging': {
            'level': 'INFO',
            'file': None,
            'max_size_mb': 10,
            'backup_count': 5
        }
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to config file. If not provided,
                        will search in default locations.
        """
        self.config_path = config_path
        self.config_data: Dict[str, Any] = self._with_defaults({})
        self.validator = ConfigValidator()
        self.logger = logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._loaded_file: Optional[str] = None
        self._loaded_mtime: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigManager":
        """Build an in-memory configuration handle.

        Raises:
            ConfigurationError: If the data is invalid.
        """
        manager = cls()
        manager._apply(copy.deepcopy(data))
        return manager

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file.

        Returns:
            Copy of the configuration data with defaults applied.

        Raises:
            FileNotFoundError: If config file cannot be found.
            ConfigurationError: If config file is invalid.
        """
        config_file = self._find_config_file()
        mtime = os.path.getmtime(config_file)
        self._apply(self._read_file(config_file))

        with self._lock:
            self._loaded_file = config_file
            self._loaded_mtime = mtime

        self.logger.info(f"Loaded configuration from {config_file}")
        return self.snapshot()

    def refresh(self) -> bool:
        """Reload the configuration file if it changed since the last read.

        A file that has become unreadable or invalid is reported and the
        previous configuration stays in effect.

        Returns:
            True if new configuration was loaded.
        """
        with self._lock:
            config_file = self._loaded_file
            last_mtime = self._loaded_mtime

        if config_file is None:
            return False

        try:
            mtime = os.path.getmtime(config_file)
            if mtime == last_mtime:
                return False
            self._apply(self._read_file(config_file))
        except (OSError, ConfigurationError) as e:
            self.logger.warning(f"Keeping previous configuration, reload of {config_file} failed: {e}")
            return False

        with self._lock:
            self._loaded_mtime = mtime

        self.logger.info(f"Reloaded configuration from {config_file}")
        return True

    def snapshot(self) -> Dict[str, Any]:
        """Return a deep copy of the current configuration."""
        with self._lock:
            return copy.deepcopy(self.config_data)

    def update(self, section: str, values: Dict[str, Any]) -> None:
        """Replace keys of one configuration section.

        Args:
            section: Section name, e.g. ``monitoring``.
            values: Keys to set in that section.

        Raises:
            ConfigurationError: If the result would be invalid. The current
                configuration is left untouched in that case.
        """
        with self._lock:
            data = copy.deepcopy(self.config_data)
            data.setdefault(section, {}).update(copy.deepcopy(values))
            self._apply(data)

    def save_config(self, path: Optional[str] = None) -> str:
        """Write the current configuration as YAML.

        Args:
            path: Destination file. Defaults to the file the configuration
                was loaded from.

        Returns:
            Path of the written file.
        """
        with self._lock:
            target = path or self._loaded_file or self.config_path or self.DEFAULT_CONFIG_LOCATIONS[0]
            directory = os.path.dirname(target)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(target, 'w', encoding='utf-8') as f:
                yaml.safe_dump(self.config_data, f, default_flow_style=False, sort_keys=False)

            if target == self._loaded_file:
                self._loaded_mtime = os.path.getmtime(target)

        self.logger.info(f"Configuration saved to {target}")
        return target

    def get_monitor_settings(self) -> MonitorSettings:
        """Build the settings snapshot used by one monitor iteration."""
        with self._lock:
            monitoring = copy.deepcopy(self.config_data.get('monitoring', {}))
            alerts = copy.deepcopy(self.config_data.get('alerts', {}))

        paths = tuple(
            MonitoredPath(
                path=str(entry['path']),
                threshold_kind=ThresholdKind.parse(entry['threshold_type']),
                threshold_value=float(entry['threshold_value']),
            )
            for entry in monitoring.get('paths') or []
        )

        return MonitorSettings(
            enabled=bool(monitoring.get('enabled', False)),
            paths=paths,
            check_interval_seconds=float(monitoring.get('check_interval_minutes', 60)) * 60,
            idle_poll_seconds=float(monitoring.get('idle_poll_seconds', 10)),
            alerts_enabled=bool(alerts.get('enabled', False)),
            custom_message=alerts.get('custom_message') or None,
        )

    def get_monitored_paths(self) -> List[Dict[str, Any]]:
        """Get all configured monitored paths.

        Returns:
            List of monitored path configurations.
        """
        return self.get_monitoring_config().get('paths') or []

    def get_monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration."""
        return self._section('monitoring')

    def get_alerts_config(self) -> Dict[str, Any]:
        """Get alerts configuration."""
        return self._section('alerts')

    def get_email_config(self) -> Dict[str, Any]:
        """Get email configuration.

        Returns:
            Email configuration dictionary, empty when email is not set up.
        """
        return self._section('email')

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self._section('logging')

    def _section(self, name: str) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self.config_data.get(name) or {})

    def _find_config_file(self) -> str:
        """Find configuration file in default locations.

        Returns:
            Path to configuration file.

        Raises:
            FileNotFoundError: If no config file is found.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        raise FileNotFoundError(
            "Configuration file not found in any of these locations:\n" +
            "\n".join(f"  - {loc}" for loc in self.DEFAULT_CONFIG_LOCATIONS) +
            "\n\nPlease copy config.example.yaml to config.yaml and customize it."
        )

    def _read_file(self, config_file: str) -> Dict[str, Any]:
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading config file {config_file}: {e}") from e

    def _apply(self, data: Dict[str, Any]) -> None:
        """Validate data, fill in defaults and make it current."""
        self.validator.validate(data)
        data = self._with_defaults(data)
        with self._lock:
            self.config_data = data

    def _with_defaults(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Set default values for optional configuration parameters."""
        for section, section_defaults in self.DEFAULTS.items():
            if data.get(section) is None:
                data[section] = {}
            for key, value in section_defaults.items():
                if key not in data[section]:
                    data[section][key] = copy.deepcopy(value)
        return data
