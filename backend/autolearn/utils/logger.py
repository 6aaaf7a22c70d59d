"""Logging setup and the in-memory activity log."""

from __future__ import annotations

import collections
import dataclasses
import logging
import sys
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ROOT_LOGGER = "autolearn"


@dataclasses.dataclass(frozen=True)
class ActivityEntry:
    timestamp: datetime
    level: str
    category: str
    message: str
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)
    exc_text: Optional[str] = None

    def render(self) -> str:
        return f"[{self.timestamp:%H:%M:%S.%f}] [{self.level:<7}] [{self.category}] {self.message}"


class ActivityLogHandler(logging.Handler):
    """Keeps the most recent log records in a bounded ring buffer.

    Extra context passed as ``extra={"activity": {...}}`` is kept as entry
    metadata.
    """

    def __init__(self, capacity: int = 1000, level: Union[int, str] = logging.NOTSET):
        super().__init__(level)
        self.capacity = capacity
        self._entries: Deque[ActivityEntry] = collections.deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            exc_text = None
            if record.exc_info:
                exc_text = logging.Formatter().formatException(record.exc_info)
            metadata = getattr(record, "activity", None)
            entry = ActivityEntry(
                timestamp=datetime.fromtimestamp(record.created),
                level=record.levelname,
                category=record.name,
                message=record.getMessage(),
                metadata=dict(metadata) if isinstance(metadata, dict) else {},
                exc_text=exc_text,
            )
        except Exception:
            self.handleError(record)
            return
        self.acquire()
        try:
            self._entries.append(entry)
        finally:
            self.release()

    def records(self, level: Optional[str] = None, logger_prefix: Optional[str] = None) -> List[ActivityEntry]:
        """Buffered entries, oldest first, optionally filtered."""
        self.acquire()
        try:
            entries = list(self._entries)
        finally:
            self.release()
        if level is not None:
            entries = [e for e in entries if e.level == level.upper()]
        if logger_prefix is not None:
            entries = [e for e in entries if e.category.startswith(logger_prefix)]
        return entries

    def recent(self, count: int = 50) -> List[ActivityEntry]:
        if count <= 0:
            return []
        return self.records()[-count:]

    def clear(self) -> None:
        self.acquire()
        try:
            self._entries.clear()
        finally:
            self.release()


def configure_logging(cfg: Dict, console: bool = False) -> ActivityLogHandler:
    """Set the package log level and attach a fresh activity handler.

    Calling it again replaces the previous activity handler.
    """
    log_cfg = cfg.get("logging", {})
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, ActivityLogHandler):
            logger.removeHandler(handler)

    activity = ActivityLogHandler(capacity=int(log_cfg.get("activity_buffer", 1000)))
    logger.addHandler(activity)

    if console and not any(type(h) is logging.StreamHandler for h in logger.handlers):
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(stream)

    return activity
