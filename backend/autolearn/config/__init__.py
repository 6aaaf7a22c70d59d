"""Configuration management for autolearn."""

from .manager import (
    DEFAULT_CONFIG,
    DEFAULT_DATA_ROOT,
    default_database_url,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_DATA_ROOT",
    "default_database_url",
    "load_config",
]
