"""Threshold monitoring of storage usage."""

import logging
import re
import threading
from typing import Callable, List, Optional, Sequence

from .models import AlertEvent, MonitoredPath, ThresholdKind, VolumeInfo
from .scanner import DirectoryScanner
from .volumes import list_volumes, resolve_volume
from ..config.config_manager import ConfigManager, MonitorSettings
from ..notifiers.base import NotificationSink
from ..utils.formatters import bytes_to_gb, format_gb

TEMPLATE_PLACEHOLDER = re.compile(r"\{(path|threshold|current)\}")


def render_alert_message(monitored: MonitoredPath, current_value: float,
                         template: Optional[str] = None) -> str:
    """Build the human readable message for a threshold violation.

    Args:
        monitored: The violated path and its threshold.
        current_value: Measured value in gigabytes.
        template: Optional text with ``{path}``, ``{threshold}`` and
            ``{current}`` placeholders. Other braces are left as they are.

    Returns:
        The rendered message.
    """
    values = {
        'path': monitored.path,
        'threshold': format_gb(monitored.threshold_value),
        'current': format_gb(current_value),
    }

    if template:
        return TEMPLATE_PLACEHOLDER.sub(lambda match: values[match.group(1)], template)

    if monitored.threshold_kind is ThresholdKind.MAX_USED_BYTES:
        return (f"Storage usage alert: {values['path']} is using {values['current']} GB, "
                f"above the limit of {values['threshold']} GB")
    return (f"Low disk space alert: {values['path']} has {values['current']} GB remaining, "
            f"below the minimum of {values['threshold']} GB")


class ThresholdMonitor:
    """Periodically checks monitored paths and raises alerts.

    The monitor is idle while monitoring is disabled in the configuration and
    re-reads the configuration at the start of every iteration, so enabling,
    disabling and editing paths take effect without a restart.
    """

    def __init__(self, config: ConfigManager, notifier: NotificationSink,
                 scanner: Optional[DirectoryScanner] = None,
                 volume_provider: Callable[[], List[VolumeInfo]] = list_volumes):
        """Initialize threshold monitor.

        Args:
            config: Shared configuration handle.
            notifier: Sink receiving alert messages.
            scanner: Scanner used for usage checks. A private one is created
                when omitted.
            volume_provider: Callable returning the current volume list.
        """
        self.config = config
        self.notifier = notifier
        self._owns_scanner = scanner is None
        self.scanner = scanner or DirectoryScanner()
        self.volume_provider = volume_provider
        self.logger = logging.getLogger(__name__)
        self._settings = MonitorSettings()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> threading.Thread:
        """Run the monitor loop on a background daemon thread."""
        if self.is_running:
            return self._thread

        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="threshold-monitor", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the loop to stop, interrupting any wait, and join it.

        A scanner created by the monitor itself is closed once the loop has
        finished.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                return
            self._thread = None
        if self._owns_scanner:
            self.scanner.close()

    def run(self) -> None:
        """Run the monitor loop until stop() is called."""
        self.logger.info("Threshold monitor started")
        while not self._stop_event.is_set():
            self._stop_event.wait(self.run_once())
        self.logger.info("Threshold monitor stopped")

    def run_once(self) -> float:
        """Run one loop iteration.

        Returns:
            Seconds to wait before the next iteration.
        """
        settings = self._read_settings()
        if not settings.enabled:
            return settings.idle_poll_seconds

        self.run_cycle(settings)
        return settings.check_interval_seconds

    def run_cycle(self, settings: MonitorSettings) -> List[AlertEvent]:
        """Evaluate every monitored path once.

        A failure on one path is logged and does not stop the others.

        Args:
            settings: Settings snapshot for this cycle.

        Returns:
            Alert events raised during the cycle.
        """
        self.logger.info(f"Checking {len(settings.paths)} monitored paths")
        volumes: Optional[List[VolumeInfo]] = None
        events = []

        for monitored in settings.paths:
            try:
                if monitored.threshold_kind is ThresholdKind.MIN_REMAINING_BYTES and volumes is None:
                    volumes = self.volume_provider()
                event = self.evaluate_path(monitored, volumes or [], settings.custom_message)
            except Exception as e:
                self.logger.error(f"Failed to check {monitored.path}: {e}")
                continue

            if event is None:
                continue

            events.append(event)
            self.logger.info(f"Threshold exceeded: {event.rendered_message}")
            if settings.alerts_enabled:
                self._dispatch(event)

        return events

    def evaluate_path(self, monitored: MonitoredPath, volumes: Sequence[VolumeInfo],
                      template: Optional[str] = None) -> Optional[AlertEvent]:
        """Compare one monitored path against its threshold.

        Args:
            monitored: Path and threshold to check.
            volumes: Volume list for free space checks.
            template: Optional alert message template.

        Returns:
            AlertEvent when the threshold is violated, otherwise None. A free
            space check whose path resolves to no volume yields None.

        Raises:
            ScanError: If a usage check cannot list the monitored directory.
        """
        kind = monitored.threshold_kind

        if kind is ThresholdKind.MAX_USED_BYTES:
            aggregate = self.scanner.measure(monitored.path)
            current = bytes_to_gb(aggregate.total_size_bytes)
            violated = current > monitored.threshold_value
        elif kind is ThresholdKind.MIN_REMAINING_BYTES:
            volume = resolve_volume(monitored.path, volumes)
            if volume is None:
                self.logger.warning(f"No volume found for {monitored.path}, skipping free space check")
                return None
            current = bytes_to_gb(volume.available_bytes)
            violated = current < monitored.threshold_value
        else:
            raise ValueError(f"Unhandled threshold kind: {kind}")

        self.logger.debug(
            f"{monitored.path}: {kind.value} current={current:.2f}GB threshold={monitored.threshold_value}GB"
        )

        if not violated:
            return None

        return AlertEvent(
            path=monitored.path,
            kind=kind,
            current_value=current,
            threshold_value=monitored.threshold_value,
            rendered_message=render_alert_message(monitored, current, template),
        )

    def _read_settings(self) -> MonitorSettings:
        """Refresh and read the configuration, keeping the last good settings on failure."""
        try:
            self.config.refresh()
            self._settings = self.config.get_monitor_settings()
        except Exception as e:
            self.logger.error(f"Could not read monitoring configuration, using previous settings: {e}")
        return self._settings

    def _dispatch(self, event: AlertEvent) -> None:
        try:
            self.notifier.deliver(event.rendered_message)
        except Exception as e:
            self.logger.error(f"Failed to deliver alert for {event.path}: {e}")
