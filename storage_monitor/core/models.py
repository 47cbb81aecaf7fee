"""Data models for storage usage scanning and monitoring."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

UNKNOWN_EXTENSION = "unknown"

BYTES_PER_GB = 1024 ** 3


@dataclass
class EntryStats:
    """Statistics for one immediate child of a scanned directory."""
    path: str
    name: str
    is_directory: bool
    size_bytes: int
    contained_file_count: int
    modified_at: int


@dataclass
class ExtensionUsage:
    """Size and file count attributed to one extension."""
    size_bytes: int = 0
    file_count: int = 0

    def add(self, size_bytes: int, file_count: int = 1) -> None:
        self.size_bytes += size_bytes
        self.file_count += file_count


@dataclass
class AggregateStats:
    """Summed statistics over a scanned set of entries."""
    total_size_bytes: int = 0
    total_file_count: int = 0
    extension_distribution: Dict[str, ExtensionUsage] = field(default_factory=dict)

    def merge(self, other: "AggregateStats") -> "AggregateStats":
        """Add another aggregate into this one.

        Args:
            other: Aggregate to merge. It is not modified.

        Returns:
            This aggregate, for chaining.
        """
        self.total_size_bytes += other.total_size_bytes
        self.total_file_count += other.total_file_count
        for extension, usage in other.extension_distribution.items():
            bucket = self.extension_distribution.setdefault(extension, ExtensionUsage())
            bucket.add(usage.size_bytes, usage.file_count)
        return self

    def extension_total(self) -> int:
        """Sum of sizes over every extension bucket."""
        return sum(usage.size_bytes for usage in self.extension_distribution.values())


class ThresholdKind(Enum):
    """Direction in which a monitored path is checked."""
    MAX_USED_BYTES = "max_used"
    MIN_REMAINING_BYTES = "min_remaining"

    @classmethod
    def parse(cls, value: str) -> "ThresholdKind":
        """Parse a configuration spelling such as ``max_used`` or ``MaxUsed``."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().replace("-", "_").lower()
        aliases = {
            "max_used": cls.MAX_USED_BYTES,
            "maxused": cls.MAX_USED_BYTES,
            "max_used_bytes": cls.MAX_USED_BYTES,
            "min_remaining": cls.MIN_REMAINING_BYTES,
            "minremaining": cls.MIN_REMAINING_BYTES,
            "min_remaining_bytes": cls.MIN_REMAINING_BYTES,
        }
        if normalized not in aliases:
            raise ValueError(f"Unknown threshold type: {value}")
        return aliases[normalized]


@dataclass(frozen=True)
class MonitoredPath:
    """A path checked against a threshold expressed in gigabytes."""
    path: str
    threshold_kind: ThresholdKind
    threshold_value: float


@dataclass(frozen=True)
class VolumeInfo:
    """A mounted storage volume."""
    mount_point: str
    total_bytes: int
    available_bytes: int

    @property
    def used_bytes(self) -> int:
        return max(self.total_bytes - self.available_bytes, 0)


@dataclass
class AlertEvent:
    """A threshold violation raised during one monitor cycle."""
    path: str
    kind: ThresholdKind
    current_value: float
    threshold_value: float
    rendered_message: str
