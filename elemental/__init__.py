"""Partition table, filesystem formatting and download helpers for OS installation."""

__version__ = "0.1.0"
__all__ = ["constants", "parted", "mkfs", "disk", "http_client"]