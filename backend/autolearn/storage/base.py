"""Abstract learned-pattern storage interface."""

from __future__ import annotations

import hashlib
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ..core.models import Category
from .schemas import LearnedRecord, LearningStats

_PROMPT_TOKEN = re.compile(r"[a-z0-9_]+")


def normalize_prompt(text: Optional[str]) -> str:
    """Lowercase word tokens, first-seen order, no duplicates, space separated."""
    if not text:
        return ""
    seen = dict.fromkeys(_PROMPT_TOKEN.findall(text.lower()))
    return " ".join(seen)


def content_digest(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sort_time(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def rank_by_prompt(records: Iterable[LearnedRecord], query: str, limit: int) -> List[LearnedRecord]:
    """Order records by token overlap with ``query``, then score, then recency.

    Records sharing no token with the query are dropped.
    """
    if limit <= 0:
        return []
    query_tokens = set(normalize_prompt(query).split())
    if not query_tokens:
        return []

    scored = []
    for record in records:
        overlap = len(query_tokens & set((record.prompt_pattern or "").split()))
        if overlap:
            scored.append((overlap, record))
    scored.sort(key=lambda item: (item[0], item[1].score, _sort_time(item[1].updated_at)), reverse=True)
    return [record for _, record in scored[:limit]]


def summarize(records: Iterable[LearnedRecord]) -> LearningStats:
    stats = LearningStats()
    for record in records:
        stats.type_counts[record.kind] += 1
        stats.total_records += 1
        stats.total_score += record.score
    return stats


class PatternStore(ABC):
    """Abstract base class for learned-pattern storage backends."""

    @abstractmethod
    def upsert(self, record: LearnedRecord) -> LearnedRecord:
        """Insert a record, or bump score and recency of an existing (kind, content)."""
        pass

    @abstractmethod
    def search_by_prompt_pattern(self, query: str, limit: int = 10) -> List[LearnedRecord]:
        """Records whose prompt pattern shares tokens with the query, best first."""
        pass

    @abstractmethod
    def get(self, kind: Category, content: str) -> Optional[LearnedRecord]:
        pass

    @abstractmethod
    def all_records(self) -> List[LearnedRecord]:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every learned record."""
        pass

    def get_stats(self) -> LearningStats:
        """Per-kind counts and total score (default implementation)."""
        return summarize(self.all_records())

    def count(self) -> int:
        """Count records (default implementation)."""
        return len(self.all_records())

    def close(self) -> None:
        """Release backend resources."""
        pass
