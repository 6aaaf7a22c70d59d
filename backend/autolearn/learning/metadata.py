"""Metadata derived from prompts, chunks and change reasons."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping

from ..core.models import CodeChunk

INTENT_KEYWORDS: Dict[str, List[str]] = {
    "create": ["create", "build", "make", "generate"],
    "modify": ["change", "modify", "update", "edit"],
    "fix": ["fix", "repair", "correct", "debug"],
    "theme": ["theme", "color", "style", "design"],
    "text": ["text", "content", "string", "message"],
}

EXPECTATION_WORDS = ("should", "must", "need", "require", "expect", "want", "create", "build", "generate")

# first match wins
REASON_TYPES = [
    ("error_fix", ("error", "bug")),
    ("optimization", ("improve", "optimize")),
    ("addition", ("add", "create")),
    ("removal", ("remove", "delete")),
    ("modification", ("change", "modify")),
]

_SENTENCE_SPLIT = re.compile(r"[.!?\n]")


def extract_intent_keywords(prompt: str) -> List[str]:
    lowered = prompt.lower()
    return [intent for intent, words in INTENT_KEYWORDS.items() if any(w in lowered for w in words)]


def extract_prompt_expectations(prompt: str) -> List[str]:
    """Lowercased sentences stating what the user expects, each listed once."""
    expectations = []
    for sentence in _SENTENCE_SPLIT.split(prompt.lower()):
        sentence = sentence.strip()
        if sentence and any(w in sentence for w in EXPECTATION_WORDS) and sentence not in expectations:
            expectations.append(sentence)
    return expectations


def _distinct(values) -> List[str]:
    return list(dict.fromkeys(values))


def extract_metadata(prompt: str, chunks: List[CodeChunk]) -> Dict[str, Any]:
    return {
        "intent": extract_intent_keywords(prompt),
        "objects": _distinct(chunk.name for chunk in chunks),
        "properties": _distinct(key for chunk in chunks for key in chunk.properties),
    }


def classify_reason(reason: str) -> str:
    lowered = reason.lower()
    for reason_type, words in REASON_TYPES:
        if any(w in lowered for w in words):
            return reason_type
    return "general"


def build_object_content(object_type: str, object_name: str, properties: Mapping[str, str], context: str) -> str:
    lines = [f"{object_type}: {object_name}", "Properties:"]
    lines += [f"  {key}: {value}" for key, value in properties.items()]
    return "\n".join(lines) + f"\n\nContext: {context}"


def build_replacement_content(old_content: str, new_content: str, reason: str) -> str:
    return f"OLD:\n{old_content}\n\nNEW:\n{new_content}\n\nREASON: {reason}"
