"""Configuration management for autolearn."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict, Optional


DEFAULT_DATA_ROOT = "~/.autolearn"

DEFAULT_CONFIG: Dict = {
    "data_root": DEFAULT_DATA_ROOT,
    # None means sqlite:///<data_root>/learning.db
    "database_url": None,
    "models_dir": "models",
    "pipeline": {
        "workers": 1,
        # 0 keeps the queue unbounded
        "queue_maxsize": 0,
        "drain_timeout": 30.0,
    },
    "search": {"limit": 10},
    "classifier": {
        # "rule_based" or "registry"
        "backend": "rule_based",
    },
    "registry": {
        "namespace": "classification_models",
        "active_model_name": None,
    },
    "logging": {
        "level": "INFO",
        "activity_buffer": 1000,
    },
}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def default_database_url(data_root: Path) -> str:
    """SQLite file inside the data root."""
    return f"sqlite:///{(data_root / 'learning.db').as_posix()}"


def load_config(data_root: Optional[Path] = None) -> Dict:
    """Load configuration.

    Returns the default configuration with environment overrides applied.
    An explicit ``data_root`` wins over ``AUTOLEARN_DATA_ROOT``.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if data_root is None:
        data_root = Path(os.getenv("AUTOLEARN_DATA_ROOT", DEFAULT_DATA_ROOT))
    root = Path(data_root).expanduser()
    config["data_root"] = str(root)

    config["database_url"] = os.getenv("AUTOLEARN_DATABASE_URL") or default_database_url(root)

    config["pipeline"]["workers"] = max(1, _env_int("AUTOLEARN_WORKERS", config["pipeline"]["workers"]))
    config["pipeline"]["queue_maxsize"] = max(
        0, _env_int("AUTOLEARN_QUEUE_MAXSIZE", config["pipeline"]["queue_maxsize"])
    )

    config["classifier"]["backend"] = (
        os.getenv("AUTOLEARN_CLASSIFIER_BACKEND", config["classifier"]["backend"]).strip().lower()
    )
    config["logging"]["level"] = os.getenv("AUTOLEARN_LOG_LEVEL", config["logging"]["level"]).upper()

    return config
