"""autolearn: learn reusable coding knowledge from prompt and code pairs."""

from .config import load_config
from .engine import LearningEngine, build_engine
from .exceptions import AutolearnError, BackendUnavailableError, StoreWriteError

__version__ = "0.1.0"

__all__ = [
    "load_config",
    "LearningEngine",
    "build_engine",
    "AutolearnError",
    "BackendUnavailableError",
    "StoreWriteError",
]
