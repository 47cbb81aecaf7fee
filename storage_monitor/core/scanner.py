"""Directory scanning functionality for storage usage."""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from .aggregator import ExtensionMap, aggregate_directory, merge_extension_maps
from .exceptions import (
    NotADirectoryScanError,
    ScanError,
    ScanPermissionError,
    ScanTargetNotFoundError,
)
from .metadata import extension_of, read_entry_metadata
from .models import AggregateStats, EntryStats, ExtensionUsage

ChildResult = Tuple[Optional[EntryStats], ExtensionMap]


class DirectoryScanner:
    """Scans a directory into per-child statistics and one merged aggregate.

    Work is fanned out across the immediate children of the scanned directory
    on a worker pool shared by every scan made through this instance. Each
    child subtree is then aggregated sequentially by a single worker.
    """

    def __init__(self, max_workers: Optional[int] = None):
        """Initialize directory scanner.

        Args:
            max_workers: Size of the shared worker pool. Defaults to the
                ThreadPoolExecutor default for this machine.
        """
        self.max_workers = max_workers
        self.logger = logging.getLogger(__name__)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    def __enter__(self) -> "DirectoryScanner":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the worker pool, waiting for running scans."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    def scan(self, directory: str) -> Tuple[List[EntryStats], AggregateStats]:
        """Scan a directory and return statistics for each immediate child.

        Args:
            directory: Directory to scan. Used as given; ``..`` segments are
                not interpreted here.

        Returns:
            Tuple of (child statistics in no particular order, aggregate).

        Raises:
            ScanError: If the directory itself cannot be listed. Failures on
                individual children only zero their contribution.
        """
        self.logger.info(f"Starting scan of {directory}")

        children = self._list_children(directory)
        results: List[ChildResult] = []
        if children:
            results = list(self._get_executor().map(self._scan_child, children))

        entries = []
        aggregate = AggregateStats()
        for entry_stats, extensions in results:
            if entry_stats is None:
                continue
            entries.append(entry_stats)
            aggregate.total_size_bytes += entry_stats.size_bytes
            aggregate.total_file_count += entry_stats.contained_file_count
            merge_extension_maps(aggregate.extension_distribution, extensions)

        self.logger.info(
            f"Completed scan of {directory}: {len(entries)} entries, "
            f"{aggregate.total_file_count} files, {aggregate.total_size_bytes} bytes"
        )
        return entries, aggregate

    def measure(self, directory: str) -> AggregateStats:
        """Return only the aggregate statistics of a directory."""
        _, aggregate = self.scan(directory)
        return aggregate

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="scan"
                )
            return self._executor

    def _list_children(self, directory: str) -> List[os.DirEntry]:
        """List the immediate children of the scan target."""
        try:
            with os.scandir(directory) as entries:
                return list(entries)
        except FileNotFoundError as e:
            raise ScanTargetNotFoundError(directory, "path does not exist") from e
        except NotADirectoryError as e:
            raise NotADirectoryScanError(directory, "path is not a directory") from e
        except PermissionError as e:
            raise ScanPermissionError(directory, "permission denied") from e
        except OSError as e:
            raise ScanError(directory, str(e)) from e

    def _scan_child(self, entry: os.DirEntry) -> ChildResult:
        """Collect statistics for one child. Runs on a pool worker."""
        metadata = read_entry_metadata(entry)

        if metadata is None:
            # Unreadable child: listed, but contributes nothing.
            return EntryStats(
                path=entry.path,
                name=entry.name,
                is_directory=self._is_dir(entry),
                size_bytes=0,
                contained_file_count=0,
                modified_at=0,
            ), {}

        if metadata.is_symlink:
            self.logger.debug(f"Skipping symlink {entry.path}")
            return None, {}

        if metadata.is_directory:
            size, count, extensions = aggregate_directory(entry.path)
        else:
            size, count = metadata.size, 1
            extensions = {extension_of(entry.name): ExtensionUsage(size, 1)}

        return EntryStats(
            path=entry.path,
            name=entry.name,
            is_directory=metadata.is_directory,
            size_bytes=size,
            contained_file_count=count,
            modified_at=metadata.modified_at,
        ), extensions

    def _is_dir(self, entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False
