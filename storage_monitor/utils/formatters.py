"""Formatting utilities for storage monitor output."""

from datetime import datetime

from ..core.models import BYTES_PER_GB

SIZE_UNITS = ['KB', 'MB', 'GB', 'TB']


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Human readable size string, e.g. ``512 B`` or ``1.50 GB``.
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = float(size_bytes)
    for unit in SIZE_UNITS:
        size /= 1024
        if size < 1024 or unit == SIZE_UNITS[-1]:
            return f"{size:.2f} {unit}"


def bytes_to_gb(size_bytes: int) -> float:
    """Convert bytes to gigabytes (1024^3)."""
    return size_bytes / BYTES_PER_GB


def format_gb(value: float) -> str:
    """Format a gigabyte amount with at most two decimals."""
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return text or "0"


def format_timestamp(timestamp: int, short: bool = True) -> str:
    """Format a unix timestamp for display.

    Args:
        timestamp: Seconds since the epoch. 0 means unknown.
        short: If True, omit seconds.

    Returns:
        Formatted date string, ``-`` when unknown.
    """
    if not timestamp:
        return "-"

    dt = datetime.fromtimestamp(timestamp)
    if short:
        return dt.strftime('%Y-%m-%d %H:%M')
    return dt.strftime('%Y-%m-%d %H:%M:%S')


def format_percentage(part: int, total: int) -> str:
    """Format part of total as a percentage with one decimal."""
    if total <= 0:
        return "0.0%"
    return f"{part / total * 100:.1f}%"


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate string to maximum length.

    Args:
        text: Text to truncate.
        max_length: Maximum length.
        suffix: Suffix to add when truncating.

    Returns:
        Truncated string.
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix
