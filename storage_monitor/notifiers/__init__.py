"""Notification sinks for storage alerts."""

from typing import Any, Dict

from .base import LogNotifier, NotificationSink
from .email_notifier import EmailNotifier


def build_notifier(email_config: Dict[str, Any], subject: str = "Storage Monitor Alert") -> NotificationSink:
    """Create the sink for the given configuration.

    Args:
        email_config: The ``email`` configuration section, possibly empty.
        subject: Subject line for e-mail alerts.

    Returns:
        An EmailNotifier when e-mail is configured, otherwise a LogNotifier.
    """
    if not email_config:
        return LogNotifier()

    return EmailNotifier(
        smtp_server=email_config['smtp_server'],
        smtp_port=email_config.get('smtp_port', 587),
        smtp_user=email_config.get('smtp_user'),
        smtp_pass=email_config.get('smtp_pass'),
        from_address=email_config['from_address'],
        to_addresses=email_config['to_addresses'],
        use_tls=email_config.get('use_tls', True),
        subject=subject,
    )


__all__ = ["NotificationSink", "LogNotifier", "EmailNotifier", "build_notifier"]
