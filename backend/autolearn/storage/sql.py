"""SQLAlchemy-backed pattern store."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..core.models import Category
from ..exceptions import StoreWriteError
from .base import PatternStore, content_digest, normalize_prompt, rank_by_prompt, utcnow
from .database import init_db, make_engine, make_session_factory
from .models import LearnedRecordRow
from .schemas import LearnedRecord, LearningStats

logger = logging.getLogger(__name__)


class SQLPatternStore(PatternStore):
    """Learned records in a relational database (SQLite by default).

    Writes are serialized by a lock. A unique-constraint race with another
    process is retried once as an update.
    """

    def __init__(self, engine: Engine, owns_engine: bool = False):
        self.engine = engine
        self._owns_engine = owns_engine
        self._session_factory = make_session_factory(engine)
        self._lock = threading.Lock()
        init_db(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SQLPatternStore":
        return cls(make_engine(database_url), owns_engine=True)

    def _find(self, session, kind: Category, content_hash: str) -> Optional[LearnedRecordRow]:
        stmt = select(LearnedRecordRow).where(
            LearnedRecordRow.kind == Category(kind).value,
            LearnedRecordRow.content_hash == content_hash,
        )
        return session.execute(stmt).scalars().first()

    def _upsert_once(self, record: LearnedRecord, content_hash: str) -> LearnedRecord:
        now = utcnow()
        with self._session_factory() as session:
            row = self._find(session, record.kind, content_hash)
            if row is None:
                row = LearnedRecordRow(
                    kind=record.kind.value,
                    content=record.content,
                    content_hash=content_hash,
                    source=record.source.value,
                    metadata_json=record.metadata_text(),
                    prompt_pattern=record.prompt_pattern or None,
                    score=1,
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
            else:
                row.score = row.score + 1
                row.updated_at = now
                if not row.prompt_pattern and record.prompt_pattern:
                    row.prompt_pattern = record.prompt_pattern
            session.commit()
            return LearnedRecord.model_validate(row)

    def upsert(self, record: LearnedRecord) -> LearnedRecord:
        content_hash = content_digest(record.content)
        with self._lock:
            try:
                try:
                    return self._upsert_once(record, content_hash)
                except IntegrityError:
                    logger.debug(f"Concurrent insert of {record.kind.value} record, retrying as update")
                    return self._upsert_once(record, content_hash)
            except SQLAlchemyError as e:
                raise StoreWriteError(f"Failed to store {record.kind.value} record: {e}") from e

    def search_by_prompt_pattern(self, query: str, limit: int = 10) -> List[LearnedRecord]:
        if limit <= 0:
            return []
        tokens = normalize_prompt(query).split()
        if not tokens:
            return []

        # narrow candidates in SQL, rank exactly in Python
        conditions = [LearnedRecordRow.prompt_pattern.like(f"%{token}%") for token in tokens]
        stmt = select(LearnedRecordRow).where(
            LearnedRecordRow.prompt_pattern.is_not(None),
            or_(*conditions),
        )
        with self._session_factory() as session:
            rows = session.execute(stmt).scalars().all()
            candidates = [LearnedRecord.model_validate(row) for row in rows]
        return rank_by_prompt(candidates, query, limit)

    def get(self, kind: Category, content: str) -> Optional[LearnedRecord]:
        with self._session_factory() as session:
            row = self._find(session, kind, content_digest(content))
            return LearnedRecord.model_validate(row) if row else None

    def all_records(self) -> List[LearnedRecord]:
        with self._session_factory() as session:
            rows = session.execute(select(LearnedRecordRow).order_by(LearnedRecordRow.id)).scalars().all()
            return [LearnedRecord.model_validate(row) for row in rows]

    def get_stats(self) -> LearningStats:
        stmt = select(
            LearnedRecordRow.kind,
            func.count(LearnedRecordRow.id),
            func.coalesce(func.sum(LearnedRecordRow.score), 0),
        ).group_by(LearnedRecordRow.kind)
        stats = LearningStats()
        with self._session_factory() as session:
            for kind, count, score in session.execute(stmt):
                stats.type_counts[Category(kind)] = count
                stats.total_records += count
                stats.total_score += int(score)
        return stats

    def count(self) -> int:
        with self._session_factory() as session:
            return session.execute(select(func.count(LearnedRecordRow.id))).scalar_one()

    def clear(self) -> None:
        with self._lock, self._session_factory() as session:
            session.query(LearnedRecordRow).delete()
            session.commit()

    def close(self) -> None:
        if self._owns_engine:
            self.engine.dispose()
