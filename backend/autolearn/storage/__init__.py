"""Persistence for learned patterns and preferences."""

from .base import PatternStore, content_digest, normalize_prompt
from .database import Base, init_db, make_engine, make_session_factory
from .factory import make_kv_store, make_pattern_store
from .kv import InMemoryKeyValueStore, KeyValueStore, SQLKeyValueStore
from .memory import InMemoryPatternStore
from .models import KeyValueEntry, LearnedRecordRow
from .schemas import LearnedRecord, LearningStats
from .sql import SQLPatternStore

__all__ = [
    "PatternStore",
    "content_digest",
    "normalize_prompt",
    "Base",
    "init_db",
    "make_engine",
    "make_session_factory",
    "make_kv_store",
    "make_pattern_store",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SQLKeyValueStore",
    "InMemoryPatternStore",
    "KeyValueEntry",
    "LearnedRecordRow",
    "LearnedRecord",
    "LearningStats",
    "SQLPatternStore",
]
