"""
Storage Monitor - filesystem usage inventory and threshold alerting.

This package scans directory trees into per-entry and aggregate usage
statistics and runs a background monitor that raises alerts when configured
paths exceed a usage limit or their volume runs low on free space.
"""

__version__ = "1.0.0"

from .config.config_manager import ConfigManager
from .core.monitor import ThresholdMonitor
from .core.scanner import DirectoryScanner
from .notifiers import EmailNotifier, LogNotifier, NotificationSink

__all__ = [
    "ConfigManager", "ThresholdMonitor", "DirectoryScanner",
    "EmailNotifier", "LogNotifier", "NotificationSink",
]
