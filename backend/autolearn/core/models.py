"""Data models for autolearn."""

from __future__ import annotations

import dataclasses
import enum
from typing import Dict


class ChunkType(str, enum.Enum):
    """Structural kind of a code chunk."""

    CLASS = "class"
    FUNCTION = "function"
    OBJECT = "object"
    VARIABLE = "variable"
    PROPERTY = "property"


class Category(str, enum.Enum):
    """Classifier output label, also the kind of a learned record."""

    CODE_SNIPPET = "code_snippet"
    API_USAGE = "api_usage"
    FIX_PATCH = "fix_patch"
    METADATA_TRANSFORMATION = "metadata_transformation"


class RecordSource(str, enum.Enum):
    """Where a learned record came from."""

    NORMAL_FLOW = "normal_flow"
    DEBUG_FEEDBACK = "debug_feedback"
    BACKGROUND_OBSERVATION = "background_observation"


class ChangeType(str, enum.Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclasses.dataclass
class CodeChunk:
    """A named, typed fragment extracted from source text."""

    type: ChunkType
    name: str
    content: str
    properties: Dict[str, str] = dataclasses.field(default_factory=dict)

    @property
    def key(self) -> tuple:
        """Identity of the chunk across two versions of the same code."""
        return (self.type, self.name)


@dataclasses.dataclass(frozen=True)
class ClassificationResult:
    category: Category
    confidence: float


@dataclasses.dataclass
class CodeDifference:
    """One entity that changed between two code versions."""

    change_type: ChangeType
    old_content: str
    new_content: str
    chunk_name: str
