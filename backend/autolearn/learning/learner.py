"""Turns ingestion tasks into learned records."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..core.classifier import Classifier
from ..core.models import Category, RecordSource
from ..core.parsing import (
    Parser,
    extract_text_content,
    extract_theme_properties,
    language_for_file,
)
from ..storage.base import PatternStore, normalize_prompt
from ..storage.schemas import LearnedRecord
from .base import Learner, LearningTask
from .diffing import compute_differences
from .metadata import (
    build_object_content,
    build_replacement_content,
    classify_reason,
    extract_metadata,
    extract_prompt_expectations,
)
from .tasks import CompleteGeneration, ObjectObservation, ReasonedReplacement

logger = logging.getLogger(__name__)


def language_hint(metadata: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Explicit ``language`` wins over the extension of ``file_path``."""
    if not metadata:
        return None
    language = metadata.get("language")
    if language:
        return str(language)
    file_path = metadata.get("file_path")
    if file_path:
        return language_for_file(str(file_path))
    return None


class DefaultLearner(Learner):

    def __init__(self, store: PatternStore, parser: Parser, classifier: Classifier):
        self.store = store
        self.parser = parser
        self.classifier = classifier

    def learn(self, task: LearningTask) -> List[LearnedRecord]:
        if isinstance(task, CompleteGeneration):
            return self.learn_complete_generation(task)
        if isinstance(task, ReasonedReplacement):
            return self.learn_reasoned_replacement(task)
        if isinstance(task, ObjectObservation):
            return [self.learn_object_observation(task)]
        raise TypeError(f"Unsupported learning task: {type(task).__name__}")

    def learn_complete_generation(self, task: CompleteGeneration) -> List[LearnedRecord]:
        chunks = self.parser.parse_to_chunks(task.code, language_hint=language_hint(task.metadata))
        combined: Dict[str, Any] = {**(task.metadata or {}), **extract_metadata(task.prompt, chunks)}
        expectations = extract_prompt_expectations(task.prompt)
        pattern = normalize_prompt(task.prompt)

        stored = []
        for chunk in chunks:
            result = self.classifier.classify_with_confidence(chunk.content, task.prompt)
            stored.append(self.store.upsert(LearnedRecord(
                kind=result.category,
                content=chunk.content,
                source=task.source,
                prompt_pattern=pattern,
                metadata={
                    "user_prompt": task.prompt,
                    "prompt_expectations": expectations,
                    "chunk_type": chunk.type.value,
                    "chunk_name": chunk.name,
                    "chunk_properties": dict(chunk.properties),
                    "metadata": combined,
                    "classification_confidence": result.confidence,
                },
            )))

        for prop, value in extract_theme_properties(chunks).items():
            stored.append(self.learn_object_observation(ObjectObservation(
                object_name=f"theme_{prop}",
                object_type="theme_property",
                properties={prop: value},
                prompt=task.prompt,
                context=f"Theme change: {prop} = {value}",
            )))

        for text in dict.fromkeys(extract_text_content(chunks)):
            stored.append(self.learn_object_observation(ObjectObservation(
                object_name="text_content",
                object_type="text",
                properties={"content": text},
                prompt=task.prompt,
                context=f"Text content: {text}",
            )))

        logger.info(
            f"Learned {len(stored)} records from {len(chunks)} chunks",
            extra={"activity": {"event": "complete_generation", "chunks": len(chunks), "records": len(stored)}},
        )
        return stored

    def learn_reasoned_replacement(self, task: ReasonedReplacement) -> List[LearnedRecord]:
        hint = language_hint(task.metadata)
        old_chunks = self.parser.parse_to_chunks(task.old_code, language_hint=hint) if task.old_code else []
        new_chunks = self.parser.parse_to_chunks(task.new_code, language_hint=hint)
        reason_type = classify_reason(task.reason)
        pattern = normalize_prompt(task.prompt)

        stored = []
        for diff in compute_differences(old_chunks, new_chunks):
            stored.append(self.store.upsert(LearnedRecord(
                kind=Category.FIX_PATCH,
                content=build_replacement_content(diff.old_content, diff.new_content, task.reason),
                source=RecordSource.DEBUG_FEEDBACK,
                prompt_pattern=pattern,
                metadata={
                    "old_code": diff.old_content,
                    "new_code": diff.new_content,
                    "reason": task.reason,
                    "reason_type": reason_type,
                    "change_type": diff.change_type.value,
                    "chunk_name": diff.chunk_name,
                    "user_prompt": task.prompt,
                    "metadata": dict(task.metadata or {}),
                },
            )))

        logger.info(
            f"Learned {len(stored)} fix patches ({reason_type})",
            extra={"activity": {"event": "reasoned_replacement", "reason_type": reason_type, "records": len(stored)}},
        )
        return stored

    def learn_object_observation(self, task: ObjectObservation) -> LearnedRecord:
        return self.store.upsert(LearnedRecord(
            kind=Category.METADATA_TRANSFORMATION,
            content=build_object_content(task.object_type, task.object_name, task.properties, task.context),
            source=RecordSource.NORMAL_FLOW,
            prompt_pattern=normalize_prompt(task.prompt),
            metadata={
                "object_name": task.object_name,
                "object_type": task.object_type,
                "properties": dict(task.properties),
                "user_prompt": task.prompt,
                "context": task.context,
            },
        ))
