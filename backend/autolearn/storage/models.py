"""SQLAlchemy models."""

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from .database import Base


class LearnedRecordRow(Base):
    """One piece of learned knowledge, deduplicated on (kind, content)."""

    __tablename__ = "learned_records"
    __table_args__ = (
        UniqueConstraint("kind", "content_hash", name="uq_learned_records_kind_hash"),
    )

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(String(50), nullable=False, index=True)
    content = Column(Text, nullable=False)
    content_hash = Column(String(64), nullable=False)  # sha256 of content
    source = Column(String(50), nullable=False, index=True)
    # "metadata" is reserved on declarative classes
    metadata_json = Column("metadata", Text, nullable=False, default="{}")
    prompt_pattern = Column(Text)
    score = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class KeyValueEntry(Base):
    """Namespaced key/value preference, value stored as JSON text."""

    __tablename__ = "kv_entries"

    namespace = Column(String(255), primary_key=True)
    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
