"""Exception hierarchy for storage monitoring.

All package-specific exceptions inherit from StorageMonitorError,
allowing callers to catch broad or narrow as needed.
"""


class StorageMonitorError(Exception):
    """Base exception for all storage monitor errors."""


class ScanError(StorageMonitorError):
    """The top-level directory of a scan could not be listed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot scan {path}: {reason}")
        self.path = path
        self.reason = reason


class ScanTargetNotFoundError(ScanError):
    """Scan target does not exist."""


class ScanPermissionError(ScanError):
    """Scan target exists but cannot be listed."""


class NotADirectoryScanError(ScanError):
    """Scan target is not a directory."""


class ConfigurationError(StorageMonitorError, ValueError):
    """Invalid or unreadable configuration."""
