from __future__ import annotations

import asyncio
import copy
import threading
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from socker_schedules.db.repos.cache_entry_repo import CacheEntryRepository


class KeyValueStore(Protocol):
    """
    Minimal async key-value contract the schedule cache depends on.

    Values are JSON-compatible (lists/dicts/strings). A missing key reads as None.
    """

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...


class MemoryKeyValueStore:
    """Process-local store; values are deep-copied so callers can't mutate cached state."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> Any | None:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


class SqlKeyValueStore:
    """
    Store backed by the `cache_entries` table.

    SQLAlchemy sessions are blocking, so every call runs on a worker thread with
    its own short-lived session.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _get_sync(self, key: str) -> Any | None:
        with self._session_factory() as session:
            return CacheEntryRepository(session).get_value(key)

    def _set_sync(self, key: str, value: Any) -> None:
        with self._session_factory() as session:
            repo = CacheEntryRepository(session)
            try:
                repo.put(key, value)
                repo.commit()
            except Exception:
                repo.rollback()
                raise

    async def get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set_sync, key, value)
