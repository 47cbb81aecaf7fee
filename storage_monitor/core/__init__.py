"""Core scanning and volume resolution functionality."""

from .aggregator import aggregate_directory
from .models import AggregateStats, EntryStats, MonitoredPath, ThresholdKind, VolumeInfo
from .scanner import DirectoryScanner
from .volumes import list_volumes, resolve_volume

__all__ = [
    "aggregate_directory", "AggregateStats", "EntryStats", "MonitoredPath",
    "ThresholdKind", "VolumeInfo", "DirectoryScanner", "list_volumes", "resolve_volume",
]
