from __future__ import annotations

import logging

import pytest

from autolearn.config import load_config
from autolearn.core import StructuralParser, TextClassifier
from autolearn.learning import DefaultLearner
from autolearn.registry import ModelRegistry
from autolearn.storage import (
    InMemoryKeyValueStore,
    InMemoryPatternStore,
    SQLKeyValueStore,
    SQLPatternStore,
    make_engine,
)
from autolearn.utils import configure_logging


@pytest.fixture
def cfg(tmp_path, monkeypatch):
    """Default configuration rooted in a temporary directory."""
    for name in (
        "AUTOLEARN_DATA_ROOT",
        "AUTOLEARN_DATABASE_URL",
        "AUTOLEARN_LOG_LEVEL",
        "AUTOLEARN_WORKERS",
        "AUTOLEARN_QUEUE_MAXSIZE",
        "AUTOLEARN_CLASSIFIER_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)
    return load_config(tmp_path / "data")


@pytest.fixture
def db_engine(tmp_path):
    engine = make_engine(f"sqlite:///{(tmp_path / 'learning.db').as_posix()}")
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(db_engine):
    return SQLPatternStore(db_engine)


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path):
    """Each pattern store implementation."""
    if request.param == "memory":
        yield InMemoryPatternStore()
        return
    engine = make_engine(f"sqlite:///{(tmp_path / 'store.db').as_posix()}")
    yield SQLPatternStore(engine)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def kv(request, db_engine):
    if request.param == "memory":
        return InMemoryKeyValueStore("classification_models")
    return SQLKeyValueStore(db_engine, "classification_models")


@pytest.fixture
def models_dir(tmp_path):
    path = tmp_path / "models"
    path.mkdir()
    return path


@pytest.fixture
def registry(kv, models_dir):
    return ModelRegistry(kv, models_dir)


@pytest.fixture
def learner():
    return DefaultLearner(InMemoryPatternStore(), StructuralParser(), TextClassifier())


@pytest.fixture
def activity(cfg):
    """Activity handler attached to the package logger for one test."""
    cfg["logging"]["level"] = "DEBUG"
    handler = configure_logging(cfg)
    yield handler
    logging.getLogger("autolearn").removeHandler(handler)
