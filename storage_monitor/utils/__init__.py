"""Utility modules for storage monitoring."""

from .formatters import bytes_to_gb, format_file_size, format_gb, format_timestamp

__all__ = ["bytes_to_gb", "format_file_size", "format_gb", "format_timestamp"]
