"""Plain-text debug report over the activity log, the store and the registry."""

from __future__ import annotations

import collections
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .core.models import Category
from .registry import ModelRegistry
from .storage.base import PatternStore
from .utils.logger import ActivityEntry, ActivityLogHandler

logger = logging.getLogger(__name__)

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LEARNING_LOGGER = "autolearn.learning"

_CATEGORY_TITLES = {
    Category.CODE_SNIPPET: "Code Snippets",
    Category.API_USAGE: "API Usage",
    Category.FIX_PATCH: "Fix Patches",
    Category.METADATA_TRANSFORMATION: "Metadata Transformations",
}


def _entry_lines(entry: ActivityEntry, with_level: bool = True) -> List[str]:
    if with_level:
        lines = [entry.render()]
    else:
        lines = [f"[{entry.timestamp:%H:%M:%S.%f}] [{entry.category}] {entry.message}"]
    lines += [f"  {key}: {value}" for key, value in entry.metadata.items()]
    return lines


def build_debug_report(
    store: Optional[PatternStore],
    registry: Optional[ModelRegistry],
    handler: ActivityLogHandler,
    recent: int = 50,
) -> str:
    """Render statistics, model status, recent activity, errors and learning events."""
    entries = handler.records()
    out = ["=== Autolearn Debug Information ===", ""]

    out.append("--- Statistics ---")
    out.append(f"Total Log Entries: {len(entries)}")
    level_counts = collections.Counter(e.level for e in entries)
    out += [f"{level.title()}: {level_counts.get(level, 0)}" for level in LEVELS]
    out.append("")

    categories = collections.Counter(e.category for e in entries)
    out.append(f"--- Categories ({len(categories)}) ---")
    out += [f"{name}: {count} entries" for name, count in categories.items()]
    out.append("")

    out.append("--- Learning Statistics ---")
    if store is None:
        out.append("No pattern store")
    else:
        try:
            stats = store.get_stats()
            out += [f"{_CATEGORY_TITLES[c]}: {stats.type_counts.get(c, 0)}" for c in Category]
            out.append(f"Total Records: {stats.total_records}")
            out.append(f"Total Score: {stats.total_score}")
        except SQLAlchemyError as e:
            logger.warning(f"Could not load learning stats: {e}")
            out.append(f"Error loading stats: {e}")
    out.append("")

    out.append("--- Classification Model ---")
    selected = registry.get_selected() if registry is not None else None
    if selected is None:
        out.append("No model selected")
    else:
        out.append(f"Selected: {selected.display_name}")
        out.append(f"Type: {selected.backend_type.name}")
        out.append(f"Downloaded: {selected.downloaded}")
        out.append(f"Ready: {registry.is_ready()}")
    if registry is not None:
        out.append(f"Active Model Name: {registry.get_active_model_name()}")
    out.append("")

    out.append(f"--- Recent Activity (last {recent}) ---")
    for entry in handler.recent(recent):
        out += _entry_lines(entry)
    out.append("")

    errors = [e for e in entries if e.level in ("ERROR", "CRITICAL")]
    if errors:
        out.append(f"--- Errors ({len(errors)}) ---")
        for entry in errors[-20:]:
            out += _entry_lines(entry, with_level=False)
            if entry.exc_text:
                out += [f"  {line}" for line in entry.exc_text.splitlines()]
        out.append("")

    learning = [e for e in entries if e.category.startswith(LEARNING_LOGGER)]
    if learning:
        out.append(f"--- Learning Events ({len(learning)}) ---")
        out += [f"[{e.timestamp:%H:%M:%S.%f}] {e.message}" for e in learning[-30:]]
        out.append("")

    return "\n".join(out)
