"""Single composition point for the learning engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from sqlalchemy.engine import Engine

from .config import load_config
from .core.classifier import Classifier, ModelLoader, make_classifier
from .core.parsing import StructuralParser
from .learning import DefaultLearner, LearningPipeline
from .registry import ModelRegistry
from .storage import PatternStore, make_engine, make_kv_store, make_pattern_store
from .storage.schemas import LearnedRecord, LearningStats

logger = logging.getLogger(__name__)


class LearningEngine:
    """Owns the stores, registry, classifier, parser and pipeline of one process."""

    def __init__(
        self,
        cfg: Dict,
        store: PatternStore,
        registry: ModelRegistry,
        classifier: Classifier,
        parser: StructuralParser,
        pipeline: LearningPipeline,
        db_engine: Optional[Engine] = None,
    ):
        self.cfg = cfg
        self.store = store
        self.registry = registry
        self.classifier = classifier
        self.parser = parser
        self.pipeline = pipeline
        self.db_engine = db_engine
        self._closed = False

    def search(self, query: str, limit: Optional[int] = None) -> List[LearnedRecord]:
        """Learned records for a prompt, best match first."""
        if limit is None:
            limit = int(self.cfg.get("search", {}).get("limit", 10))
        return self.store.search_by_prompt_pattern(query, limit)

    def stats(self) -> LearningStats:
        return self.store.get_stats()

    def close(self) -> None:
        """Drain queued learning, then release the database."""
        if self._closed:
            return
        self._closed = True
        self.pipeline.stop(drain=True)
        self.store.close()
        if self.db_engine is not None:
            self.db_engine.dispose()

    def __enter__(self) -> "LearningEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def build_engine(
    cfg: Optional[Dict] = None,
    *,
    loader: Optional[ModelLoader] = None,
    active_consumer: Optional[Callable[[], Optional[str]]] = None,
) -> LearningEngine:
    """Wire every component from configuration.

    A configured ``database_url`` backs both the pattern store and the registry
    preferences; without one everything stays in memory.
    """
    cfg = cfg if cfg is not None else load_config()

    database_url = cfg.get("database_url")
    db_engine = make_engine(database_url) if database_url else None

    store = make_pattern_store(cfg, engine=db_engine)
    kv = make_kv_store(cfg, engine=db_engine)

    registry_cfg = cfg.get("registry", {})
    registry = ModelRegistry(
        kv,
        models_dir=Path(cfg.get("data_root", ".")).expanduser() / cfg.get("models_dir", "models"),
        default_active_model_name=registry_cfg.get("active_model_name"),
    )

    classifier = make_classifier(cfg, registry=registry, loader=loader)
    parser = StructuralParser()

    pipeline_cfg = cfg.get("pipeline", {})
    pipeline = LearningPipeline(
        DefaultLearner(store, parser, classifier),
        workers=int(pipeline_cfg.get("workers", 1)),
        queue_maxsize=int(pipeline_cfg.get("queue_maxsize", 0)),
        active_consumer=active_consumer,
        drain_timeout=float(pipeline_cfg.get("drain_timeout", 30.0)),
    )

    logger.info(
        f"Learning engine ready (store={type(store).__name__}, classifier={type(classifier).__name__}, "
        f"workers={pipeline.workers})"
    )
    return LearningEngine(cfg, store, registry, classifier, parser, pipeline, db_engine=db_engine)
