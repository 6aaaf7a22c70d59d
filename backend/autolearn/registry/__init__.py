"""Classification model registry."""

from .descriptors import (
    BUILT_IN_MODELS,
    BackendType,
    ClassificationModelDescriptor,
    file_extension,
)
from .manager import OFFLINE_MODEL_NAME, ModelRegistry

__all__ = [
    "BUILT_IN_MODELS",
    "BackendType",
    "ClassificationModelDescriptor",
    "file_extension",
    "OFFLINE_MODEL_NAME",
    "ModelRegistry",
]
