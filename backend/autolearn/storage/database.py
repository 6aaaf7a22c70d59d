"""Database engine and session setup."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..utils.file_utils import ensure_dir

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """Create an engine; SQLite connections are shared across worker threads."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # a private in-memory database must stay on one connection
        kwargs["poolclass"] = StaticPool
    else:
        ensure_dir(Path(url.database).expanduser().resolve().parent)
    return create_engine(database_url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet."""
    from . import models  # noqa: F401  registers the tables on Base

    Base.metadata.create_all(bind=engine)
