"""Utility functions for autolearn."""

from .file_utils import ensure_dir, file_exists
from .logger import ActivityEntry, ActivityLogHandler, configure_logging

__all__ = [
    "ensure_dir",
    "file_exists",
    "ActivityEntry",
    "ActivityLogHandler",
    "configure_logging",
]
