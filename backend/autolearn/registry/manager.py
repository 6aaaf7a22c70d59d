"""Catalog of classification backends, selection and readiness."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..storage.kv import KeyValueStore
from ..utils.file_utils import ensure_dir, file_exists
from .descriptors import (
    BUILT_IN_MODELS,
    CODEBERT_MERGES_ID,
    CODEBERT_VOCAB_ID,
    BackendType,
    ClassificationModelDescriptor,
    file_extension,
)

logger = logging.getLogger(__name__)

OFFLINE_MODEL_NAME = "autolearn-offline"

CUSTOM_MODELS_KEY = "custom_models"
SELECTED_MODEL_KEY = "selected_model"
ACTIVE_MODEL_NAME_KEY = "active_model_name"
READY_KEY_PREFIX = "model_ready_"


class ModelRegistry:
    """Built-in and user-added model descriptors persisted in a key/value store.

    User-added entries override built-ins sharing an id; that is how a built-in
    records its downloaded file. Read-modify-write sequences hold a re-entrant
    lock.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        models_dir: Path,
        default_active_model_name: Optional[str] = None,
        built_ins: Optional[List[ClassificationModelDescriptor]] = None,
    ):
        self.kv = kv
        self.models_dir = Path(models_dir)
        self.default_active_model_name = default_active_model_name
        self.built_ins = list(BUILT_IN_MODELS if built_ins is None else built_ins)
        self._lock = threading.RLock()

    # -- persisted custom set ---------------------------------------------------

    def _load_custom(self) -> List[ClassificationModelDescriptor]:
        models = []
        for raw in self.kv.get(CUSTOM_MODELS_KEY, []) or []:
            try:
                models.append(ClassificationModelDescriptor.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable model descriptor {raw!r}: {e}")
        return models

    def _save_custom(self, models: List[ClassificationModelDescriptor]) -> None:
        self.kv.set(CUSTOM_MODELS_KEY, [m.model_dump(mode="json") for m in models])

    def _built_in(self, model_id: str) -> Optional[ClassificationModelDescriptor]:
        return next((m for m in self.built_ins if m.id == model_id), None)

    # -- catalog ----------------------------------------------------------------

    def list_available(self) -> List[ClassificationModelDescriptor]:
        """Built-ins (or their persisted override) followed by user-added models."""
        with self._lock:
            custom = {m.id: m for m in self._load_custom()}
        available = [custom.pop(m.id, m) for m in self.built_ins]
        return available + list(custom.values())

    def get(self, model_id: str) -> Optional[ClassificationModelDescriptor]:
        return next((m for m in self.list_available() if m.id == model_id), None)

    def add_custom(self, descriptor: ClassificationModelDescriptor) -> bool:
        """Persist a user model; False when the id is already taken."""
        with self._lock:
            if self.get(descriptor.id) is not None:
                logger.info(f"Model id {descriptor.id!r} already registered")
                return False
            custom = self._load_custom()
            custom.append(descriptor.model_copy(update={"built_in": False}))
            self._save_custom(custom)
        logger.info(f"Added custom model {descriptor.id!r}")
        return True

    def remove_custom(self, model_id: str) -> bool:
        with self._lock:
            custom = self._load_custom()
            remaining = [m for m in custom if m.id != model_id]
            if len(remaining) == len(custom):
                return False
            self._save_custom(remaining)
            if self.kv.get(SELECTED_MODEL_KEY) == model_id:
                self.kv.delete(SELECTED_MODEL_KEY)
        logger.info(f"Removed custom model {model_id!r}")
        return True

    # -- selection --------------------------------------------------------------

    def set_selected(self, model_id: Optional[str]) -> None:
        with self._lock:
            if model_id:
                self.kv.set(SELECTED_MODEL_KEY, model_id)
            else:
                self.kv.delete(SELECTED_MODEL_KEY)

    def get_selected(self) -> Optional[ClassificationModelDescriptor]:
        selected_id = self.kv.get(SELECTED_MODEL_KEY)
        if not selected_id:
            return None
        return self.get(selected_id)

    def set_active_model_name(self, name: Optional[str]) -> None:
        if name:
            self.kv.set(ACTIVE_MODEL_NAME_KEY, name)
        else:
            self.kv.delete(ACTIVE_MODEL_NAME_KEY)

    def get_active_model_name(self) -> str:
        """Configured name, else the selected model's display name, else the offline sentinel."""
        name = self.kv.get(ACTIVE_MODEL_NAME_KEY) or self.default_active_model_name
        if name:
            return name
        selected = self.get_selected()
        if selected is not None:
            return selected.display_name
        return OFFLINE_MODEL_NAME

    # -- files ------------------------------------------------------------------

    def resolve_file_path(self, model_id: str) -> Optional[Path]:
        """Existing file backing the model, or None."""
        model = self.get(model_id)
        if model is None:
            return None

        if model.local_file_path and file_exists(Path(model.local_file_path)):
            return Path(model.local_file_path)

        ensure_dir(self.models_dir)
        candidate = self.models_dir / f"{model.id}{file_extension(model)}"
        return candidate if file_exists(candidate) else None

    def resolve_backend_paths(self, model_id: str) -> Optional[Dict[str, Path]]:
        """Every file a loader needs for the model, or None when one is missing.

        CodeBERT graphs also need the tokenizer vocabulary and merge rules.
        """
        model = self.get(model_id)
        if model is None:
            return None
        model_path = self.resolve_file_path(model_id)
        if model_path is None:
            return None

        paths = {"model": model_path}
        if model.backend_type == BackendType.CODEBERT_ONNX and model_id not in (CODEBERT_VOCAB_ID, CODEBERT_MERGES_ID):
            vocab = self.resolve_file_path(CODEBERT_VOCAB_ID)
            merges = self.resolve_file_path(CODEBERT_MERGES_ID)
            if vocab is None or merges is None:
                logger.info(f"CodeBERT tokenizer files missing for {model_id!r}")
                return None
            paths["vocab"] = vocab
            paths["merges"] = merges
        return paths

    def mark_downloaded(self, model_id: str, file_path: Path) -> bool:
        """Record the file backing a model once it exists on disk.

        Built-ins are promoted into the persisted set with the new path.
        """
        path = Path(file_path)
        if not file_exists(path):
            logger.warning(f"Cannot mark {model_id!r} downloaded, {path} does not exist")
            return False

        with self._lock:
            model = self.get(model_id)
            if model is None:
                return False
            updated = model.model_copy(update={"local_file_path": str(path), "downloaded": True})
            custom = [m for m in self._load_custom() if m.id != model_id]
            custom.append(updated)
            self._save_custom(custom)
        logger.info(f"Model {model_id!r} available at {path}")
        return True

    # -- readiness --------------------------------------------------------------

    def mark_ready(self, model_id: str, ready: bool = True) -> None:
        """Persist whether the backend for ``model_id`` initialized successfully."""
        self.kv.set(f"{READY_KEY_PREFIX}{model_id}", bool(ready))

    def is_ready(self) -> bool:
        """True when a model is selected, its file exists and it was marked ready."""
        selected = self.get_selected()
        if selected is None:
            return False
        if self.resolve_file_path(selected.id) is None:
            return False
        return bool(self.kv.get(f"{READY_KEY_PREFIX}{selected.id}", False))
