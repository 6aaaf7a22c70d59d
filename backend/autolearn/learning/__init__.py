"""Learning from usage: tasks, learner and the asynchronous pipeline."""

from .base import Learner, LearningTask
from .diffing import compute_differences
from .learner import DefaultLearner, language_hint
from .metadata import (
    classify_reason,
    extract_intent_keywords,
    extract_metadata,
    extract_prompt_expectations,
)
from .pipeline import OFFLINE_PROVIDER, LearningPipeline
from .tasks import CompleteGeneration, ObjectObservation, ReasonedReplacement

__all__ = [
    "Learner",
    "LearningTask",
    "compute_differences",
    "DefaultLearner",
    "language_hint",
    "classify_reason",
    "extract_intent_keywords",
    "extract_metadata",
    "extract_prompt_expectations",
    "OFFLINE_PROVIDER",
    "LearningPipeline",
    "CompleteGeneration",
    "ObjectObservation",
    "ReasonedReplacement",
]
