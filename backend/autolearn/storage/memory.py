"""In-process pattern store, used for ephemeral mode and tests."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple

from ..core.models import Category
from .base import PatternStore, normalize_prompt, rank_by_prompt, utcnow
from .schemas import LearnedRecord


class InMemoryPatternStore(PatternStore):

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[Tuple[Category, str], LearnedRecord] = {}
        self._next_id = 1

    def upsert(self, record: LearnedRecord) -> LearnedRecord:
        key = (record.kind, record.content)
        now = utcnow()
        with self._lock:
            existing = self._records.get(key)
            if existing is None:
                stored = record.model_copy(update={
                    "id": self._next_id,
                    "score": 1,
                    "prompt_pattern": record.prompt_pattern or None,
                    "created_at": now,
                    "updated_at": now,
                })
                self._next_id += 1
            else:
                stored = existing.model_copy(update={
                    "score": existing.score + 1,
                    "prompt_pattern": existing.prompt_pattern or record.prompt_pattern or None,
                    "updated_at": now,
                })
            self._records[key] = stored
            return stored.model_copy(deep=True)

    def search_by_prompt_pattern(self, query: str, limit: int = 10) -> List[LearnedRecord]:
        return rank_by_prompt(self.all_records(), normalize_prompt(query), limit)

    def get(self, kind: Category, content: str) -> Optional[LearnedRecord]:
        with self._lock:
            record = self._records.get((Category(kind), content))
            return record.model_copy(deep=True) if record else None

    def all_records(self) -> List[LearnedRecord]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._records.values()]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
