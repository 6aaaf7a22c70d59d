"""Chunk-level differences between two versions of the same code."""

from __future__ import annotations

from typing import List

from ..core.models import ChangeType, CodeChunk, CodeDifference


def compute_differences(old_chunks: List[CodeChunk], new_chunks: List[CodeChunk]) -> List[CodeDifference]:
    """Match chunks on (type, name).

    Emits modified and added entries in new-chunk order, then removed entries
    in old-chunk order. Unchanged chunks produce nothing.
    """
    old_by_key = {}
    for chunk in old_chunks:
        old_by_key.setdefault(chunk.key, chunk)
    new_keys = {chunk.key for chunk in new_chunks}

    differences = []
    seen = set()
    for chunk in new_chunks:
        if chunk.key in seen:
            continue
        seen.add(chunk.key)
        old = old_by_key.get(chunk.key)
        if old is None:
            differences.append(CodeDifference(ChangeType.ADDED, "", chunk.content, chunk.name))
        elif old.content != chunk.content:
            differences.append(CodeDifference(ChangeType.MODIFIED, old.content, chunk.content, chunk.name))

    for key, chunk in old_by_key.items():
        if key not in new_keys:
            differences.append(CodeDifference(ChangeType.REMOVED, chunk.content, "", chunk.name))
    return differences
