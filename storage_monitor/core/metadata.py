"""Per-entry filesystem metadata retrieval."""

import logging
import os
import stat
from dataclasses import dataclass
from typing import Optional

from .models import UNKNOWN_EXTENSION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryMetadata:
    """Metadata of a single filesystem entry, symlinks not followed."""
    size: int
    modified_at: int
    is_directory: bool
    is_symlink: bool


def read_metadata(path: str) -> Optional[EntryMetadata]:
    """Read metadata for a path without following symlinks.

    Args:
        path: Filesystem path.

    Returns:
        EntryMetadata, or None if the entry cannot be read.
    """
    try:
        st = os.lstat(path)
    except OSError as e:
        logger.debug(f"Cannot read metadata for {path}: {e}")
        return None
    return _from_stat(st)


def read_entry_metadata(entry: os.DirEntry) -> Optional[EntryMetadata]:
    """Read metadata for a directory entry returned by os.scandir.

    Uses the stat result cached on the entry where the platform provides one.
    """
    try:
        st = entry.stat(follow_symlinks=False)
    except OSError as e:
        logger.debug(f"Cannot read metadata for {entry.path}: {e}")
        return None
    return _from_stat(st)


def _from_stat(st: os.stat_result) -> EntryMetadata:
    is_symlink = stat.S_ISLNK(st.st_mode)
    is_directory = stat.S_ISDIR(st.st_mode)
    return EntryMetadata(
        size=0 if (is_symlink or is_directory) else st.st_size,
        modified_at=_modified_seconds(st),
        is_directory=is_directory,
        is_symlink=is_symlink,
    )


def _modified_seconds(st: os.stat_result) -> int:
    """Modification time as unix seconds, 0 when unavailable."""
    try:
        modified = int(st.st_mtime)
    except (AttributeError, OverflowError, ValueError):
        return 0
    return modified if modified > 0 else 0


def extension_of(name: str) -> str:
    """Return the lowercase extension of a file name.

    The extension is whatever follows the last dot. Names without a dot,
    or ending in one, are reported under the unknown bucket.
    """
    _, dot, extension = name.rpartition(".")
    if not dot or not extension:
        return UNKNOWN_EXTENSION
    return extension.lower()
