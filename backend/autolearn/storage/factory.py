"""Factory for creating store instances."""

from __future__ import annotations

from typing import Dict, Optional

from sqlalchemy.engine import Engine

from .base import PatternStore
from .kv import InMemoryKeyValueStore, KeyValueStore, SQLKeyValueStore
from .memory import InMemoryPatternStore
from .sql import SQLPatternStore


def make_pattern_store(cfg: Dict, engine: Optional[Engine] = None) -> PatternStore:
    """Pattern store for the configured database; in-memory when there is none."""
    if engine is not None:
        return SQLPatternStore(engine)
    url = cfg.get("database_url")
    if not url:
        return InMemoryPatternStore()
    return SQLPatternStore.from_url(url)


def make_kv_store(cfg: Dict, engine: Optional[Engine] = None, namespace: Optional[str] = None) -> KeyValueStore:
    namespace = namespace or cfg.get("registry", {}).get("namespace", "classification_models")
    if engine is None:
        return InMemoryKeyValueStore(namespace)
    return SQLKeyValueStore(engine, namespace)
