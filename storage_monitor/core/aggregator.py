"""Recursive size aggregation for a directory subtree.

Each call walks its subtree depth-first on the calling thread. Parallelism is
applied one level up, by the scanner, across the immediate children of the
scanned directory, so the number of concurrent traversals never grows with
the depth of the tree.
"""

import logging
import os
from typing import Dict, List, Tuple

from .metadata import extension_of, read_entry_metadata
from .models import ExtensionUsage

logger = logging.getLogger(__name__)

ExtensionMap = Dict[str, ExtensionUsage]

# Subtrees nested deeper than this are finished with an explicit stack.
MAX_RECURSION_DEPTH = 128


def aggregate_directory(path: str) -> Tuple[int, int, ExtensionMap]:
    """Sum the size and file count of every file below a directory.

    Symlinks are neither followed nor counted. Entries and subdirectories that
    cannot be read contribute nothing.

    Args:
        path: Directory to aggregate.

    Returns:
        Tuple of (total size in bytes, file count, extension map).
    """
    return _aggregate(path, 0)


def merge_extension_maps(target: ExtensionMap, source: ExtensionMap) -> ExtensionMap:
    """Add every bucket of source into target, summing matching keys."""
    for extension, usage in source.items():
        bucket = target.setdefault(extension, ExtensionUsage())
        bucket.add(usage.size_bytes, usage.file_count)
    return target


def _aggregate(path: str, depth: int) -> Tuple[int, int, ExtensionMap]:
    if depth >= MAX_RECURSION_DEPTH:
        logger.debug(f"Depth {depth} reached at {path}, switching to iterative traversal")
        return _aggregate_iterative(path)

    size = 0
    count = 0
    extensions: ExtensionMap = {}

    for entry in _list_entries(path):
        metadata = read_entry_metadata(entry)
        if metadata is None or metadata.is_symlink:
            continue

        if metadata.is_directory:
            sub_size, sub_count, sub_extensions = _aggregate(entry.path, depth + 1)
            size += sub_size
            count += sub_count
            merge_extension_maps(extensions, sub_extensions)
        else:
            size += metadata.size
            count += 1
            _add_file(extensions, entry.name, metadata.size)

    return size, count, extensions


def _aggregate_iterative(root: str) -> Tuple[int, int, ExtensionMap]:
    size = 0
    count = 0
    extensions: ExtensionMap = {}
    pending = [root]

    while pending:
        for entry in _list_entries(pending.pop()):
            metadata = read_entry_metadata(entry)
            if metadata is None or metadata.is_symlink:
                continue

            if metadata.is_directory:
                pending.append(entry.path)
            else:
                size += metadata.size
                count += 1
                _add_file(extensions, entry.name, metadata.size)

    return size, count, extensions


def _add_file(extensions: ExtensionMap, name: str, size: int) -> None:
    extensions.setdefault(extension_of(name), ExtensionUsage()).add(size)


def _list_entries(path: str) -> List[os.DirEntry]:
    """List a directory, returning nothing if it cannot be read."""
    try:
        with os.scandir(path) as entries:
            return list(entries)
    except OSError as e:
        logger.debug(f"Skipping unreadable directory {path}: {e}")
        return []
