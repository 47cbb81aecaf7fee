"""Configuration validation for storage monitor."""

import os
from typing import Any, Dict, List

from ..core.exceptions import ConfigurationError
from ..core.models import ThresholdKind


class ConfigValidator:
    """Validates storage monitor configuration."""

    KNOWN_SECTIONS = ['monitoring', 'alerts', 'email', 'logging']
    REQUIRED_EMAIL_FIELDS = ['smtp_server', 'from_address', 'to_addresses']

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ConfigurationError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration must be a mapping")

        for section in self.KNOWN_SECTIONS:
            if config.get(section) is not None and not isinstance(config[section], dict):
                raise ConfigurationError(f"Configuration section '{section}' must be a mapping")

        if config.get('monitoring'):
            self._validate_monitoring(config['monitoring'])

        if config.get('alerts'):
            self._validate_alerts(config['alerts'])

        # An empty email section means email is not configured
        if config.get('email'):
            self._validate_email_config(config['email'])

    def _validate_monitoring(self, monitoring: Dict[str, Any]) -> None:
        """Validate the monitoring section.

        Args:
            monitoring: Monitoring configuration dictionary.

        Raises:
            ConfigurationError: If intervals or monitored paths are invalid.
        """
        for key in ('check_interval_minutes', 'idle_poll_seconds'):
            if key in monitoring:
                self._require_positive_number(monitoring[key], f"monitoring.{key}")

        max_workers = monitoring.get('max_workers')
        if max_workers is not None:
            if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1:
                raise ConfigurationError(f"monitoring.max_workers must be a positive integer: {max_workers}")

        self._validate_paths(monitoring.get('paths') or [])

    def _validate_paths(self, paths: List[Dict[str, Any]]) -> None:
        if not isinstance(paths, list):
            raise ConfigurationError("monitoring.paths must be a list")

        for i, entry in enumerate(paths):
            if not isinstance(entry, dict):
                raise ConfigurationError(f"Monitored path {i} must be a dictionary")

            missing_fields = [field for field in ('path', 'threshold_type', 'threshold_value')
                              if field not in entry]
            if missing_fields:
                raise ConfigurationError(f"Monitored path {i} missing required fields: {missing_fields}")

            if not entry['path']:
                raise ConfigurationError(f"Monitored path {i} path cannot be empty")

            if not os.path.isabs(str(entry['path'])):
                raise ConfigurationError(
                    f"Monitored path {i} must be absolute: {entry['path']}"
                )

            try:
                ThresholdKind.parse(entry['threshold_type'])
            except ValueError as e:
                raise ConfigurationError(f"Monitored path {i}: {e}") from e

            value = entry['threshold_value']
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(
                    f"Monitored path {i} has invalid threshold_value: {value}"
                )

    def _validate_alerts(self, alerts: Dict[str, Any]) -> None:
        message = alerts.get('custom_message')
        if message is not None and not isinstance(message, str):
            raise ConfigurationError("alerts.custom_message must be a string")

    def _validate_email_config(self, email_config: Dict[str, Any]) -> None:
        """Validate email configuration.

        Args:
            email_config: Email configuration dictionary.

        Raises:
            ConfigurationError: If email configuration is invalid.
        """
        missing_fields = [field for field in self.REQUIRED_EMAIL_FIELDS if field not in email_config]
        if missing_fields:
            raise ConfigurationError(f"Email configuration missing required fields: {missing_fields}")

        if 'smtp_port' in email_config:
            try:
                port = int(email_config['smtp_port'])
            except (ValueError, TypeError):
                port = 0
            if not (1 <= port <= 65535):
                raise ConfigurationError(
                    f"Email configuration has invalid SMTP port: {email_config['smtp_port']}"
                )

        to_addresses = email_config.get('to_addresses', [])
        if not isinstance(to_addresses, list) or not to_addresses:
            raise ConfigurationError("Email to_addresses must be a non-empty list")

    def _require_positive_number(self, value: Any, name: str) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigurationError(f"{name} must be a positive number: {value}")
