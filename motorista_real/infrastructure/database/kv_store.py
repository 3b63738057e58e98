"""Key-value blob stores: the only persistence contract the app depends on"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional

from sqlalchemy.orm import Session, sessionmaker

from motorista_real.infrastructure.database.models import KVBlob


class KeyValueStore(ABC):
    """
    get/set/delete over serialized blobs.

    Writers re-serialize whole collections, so every read-modify-write must
    run inside ``transaction()`` (or ``update()``) to avoid lost updates.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, blob: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @contextmanager
    def transaction(self) -> Iterator["KeyValueStore"]:
        """Serialize writers; re-entrant so operations can nest"""
        with self._lock:
            yield self

    def update(self, key: str, fn: Callable[[Optional[str]], str]) -> str:
        """Atomically replace the blob at key with fn(current_blob)"""
        with self.transaction():
            blob = fn(self.get(key))
            self.set(key, blob)
            return blob


class InMemoryStore(KeyValueStore):
    """Dict-backed store; rolls back every key if a transaction raises"""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        super().__init__()
        self._data: Dict[str, str] = dict(initial or {})
        self._depth = 0

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        self._data[key] = blob

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    @contextmanager
    def transaction(self) -> Iterator["KeyValueStore"]:
        with self._lock:
            snapshot = dict(self._data) if self._depth == 0 else None
            self._depth += 1
            try:
                yield self
            except Exception:
                if snapshot is not None:
                    self._data = snapshot
                raise
            finally:
                self._depth -= 1


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the kv_blob table; one DB transaction per outermost block"""

    def __init__(self, session_factory: sessionmaker) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._session: Optional[Session] = None

    @contextmanager
    def transaction(self) -> Iterator["KeyValueStore"]:
        with self._lock:
            if self._session is not None:
                yield self
                return

            session = self._session_factory()
            self._session = session
            try:
                yield self
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                self._session = None
                session.close()

    def _row(self, key: str, for_update: bool = False) -> Optional[KVBlob]:
        return self._session.get(KVBlob, key, with_for_update=for_update)

    def get(self, key: str) -> Optional[str]:
        with self.transaction():
            row = self._row(key)
            return row.value if row is not None else None

    def set(self, key: str, blob: str) -> None:
        with self.transaction():
            row = self._row(key)
            if row is None:
                self._session.add(KVBlob(key=key, value=blob, version=1))
            else:
                row.value = blob
                row.version += 1
            self._session.flush()

    def delete(self, key: str) -> None:
        with self.transaction():
            row = self._row(key)
            if row is not None:
                self._session.delete(row)

    def update(self, key: str, fn: Callable[[Optional[str]], str]) -> str:
        with self.transaction():
            # Row lock where the dialect supports it (ignored by SQLite)
            row = self._row(key, for_update=True)
            blob = fn(row.value if row is not None else None)
            self.set(key, blob)
            return blob
