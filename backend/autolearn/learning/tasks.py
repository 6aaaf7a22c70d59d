"""Units of work queued on the learning pipeline."""

from __future__ import annotations

import dataclasses
from typing import Any, Dict, Optional

from ..core.models import RecordSource


@dataclasses.dataclass(frozen=True)
class CompleteGeneration:
    prompt: str
    code: str
    metadata: Optional[Dict[str, Any]] = None
    source: RecordSource = RecordSource.NORMAL_FLOW


@dataclasses.dataclass(frozen=True)
class ReasonedReplacement:
    prompt: str
    old_code: Optional[str]
    new_code: str
    reason: str
    metadata: Optional[Dict[str, Any]] = None


@dataclasses.dataclass(frozen=True)
class ObjectObservation:
    object_name: str
    object_type: str
    properties: Dict[str, str]
    prompt: str
    context: str
