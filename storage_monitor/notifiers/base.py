"""Notification sink interface used by the threshold monitor."""

import logging
from abc import ABC, abstractmethod


class NotificationSink(ABC):
    """Delivers rendered alert messages to some outside channel.

    Implementations report their own delivery failures; the monitor treats
    any exception raised here as a failed delivery and carries on.
    """

    @abstractmethod
    def deliver(self, message: str) -> None:
        """Deliver one alert message."""


class LogNotifier(NotificationSink):
    """Writes alerts to the log. Used when no transport is configured."""

    def __init__(self, level: int = logging.WARNING):
        self.level = level
        self.logger = logging.getLogger(__name__)

    def deliver(self, message: str) -> None:
        self.logger.log(self.level, f"ALERT: {message}")
