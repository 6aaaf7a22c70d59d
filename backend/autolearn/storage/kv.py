"""Namespaced key/value preferences."""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import StoreWriteError
from .database import init_db, make_session_factory
from .models import KeyValueEntry


class KeyValueStore(ABC):
    """JSON-serializable values under string keys within one namespace."""

    def __init__(self, namespace: str):
        self.namespace = namespace

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass


class InMemoryKeyValueStore(KeyValueStore):

    def __init__(self, namespace: str):
        super().__init__(namespace)
        self._lock = threading.Lock()
        self._data: Dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            raw = self._data.get(key)
        return default if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        with self._lock:
            self._data[key] = encoded

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._data)


class SQLKeyValueStore(KeyValueStore):
    """Rows of ``kv_entries`` sharing one namespace."""

    def __init__(self, engine: Engine, namespace: str):
        super().__init__(namespace)
        self._session_factory = make_session_factory(engine)
        init_db(engine)

    def _entry(self, session, key: str):
        return session.get(KeyValueEntry, (self.namespace, key))

    def get(self, key: str, default: Any = None) -> Any:
        with self._session_factory() as session:
            entry = self._entry(session, key)
            return default if entry is None else json.loads(entry.value)

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        try:
            with self._session_factory() as session:
                entry = self._entry(session, key)
                if entry is None:
                    session.add(KeyValueEntry(namespace=self.namespace, key=key, value=encoded))
                else:
                    entry.value = encoded
                session.commit()
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Failed to write {self.namespace}/{key}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with self._session_factory() as session:
                entry = self._entry(session, key)
                if entry is not None:
                    session.delete(entry)
                    session.commit()
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Failed to delete {self.namespace}/{key}: {e}") from e

    def keys(self) -> List[str]:
        stmt = (
            select(KeyValueEntry.key)
            .where(KeyValueEntry.namespace == self.namespace)
            .order_by(KeyValueEntry.key)
        )
        with self._session_factory() as session:
            return list(session.execute(stmt).scalars())
