"""File utility functions."""

from __future__ import annotations

from pathlib import Path


def ensure_dir(p: Path) -> None:
    """Create directory if it doesn't exist."""
    p.mkdir(parents=True, exist_ok=True)


def file_exists(path: Path) -> bool:
    """True for an existing regular file."""
    try:
        return path.is_file()
    except OSError:
        return False
