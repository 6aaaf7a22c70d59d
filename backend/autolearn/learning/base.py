"""Learner Interface."""

from __future__ import annotations

from typing import List, Union

from ..storage.schemas import LearnedRecord
from .tasks import CompleteGeneration, ObjectObservation, ReasonedReplacement

LearningTask = Union[CompleteGeneration, ReasonedReplacement, ObjectObservation]


class Learner:
    """Abstract base class for turning a learning task into stored records."""

    def learn(self, task: LearningTask) -> List[LearnedRecord]:
        raise NotImplementedError
