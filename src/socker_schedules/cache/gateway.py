from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from socker_schedules.cache.store import KeyValueStore
from socker_schedules.ingestion.normalize import DateLayout, normalize_rows
from socker_schedules.ingestion.providers.base.types import Game
from socker_schedules.ingestion.providers.spappz.parser import parse_schedule_csv

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "socker-schedules"
FETCH_DATE_KEY = "fetch-date"


def iso_timestamp(dt: datetime) -> str:
    return dt.isoformat()


class ScheduleCache:
    """
    Per-source Game lists plus one shared fetch timestamp in a key-value store.

    Keys: `<namespace>:<source_id>` and `<namespace>:fetch-date`.

    `put*` writes are awaited by the caller. `persist*` writes are scheduled as
    tasks and returned unawaited: a refresh hands its result back without
    waiting for the store, so a cache read right after a refresh may still see
    older per-source entries next to the new timestamp. Use `drain()` to wait
    for every outstanding write.
    """

    def __init__(self, store: KeyValueStore, *, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.store = store
        self.namespace = namespace
        self._pending: set[asyncio.Task[None]] = set()

    def key_for(self, source_id: str) -> str:
        return f"{self.namespace}:{source_id}"

    @property
    def fetch_date_key(self) -> str:
        return f"{self.namespace}:{FETCH_DATE_KEY}"

    # -----------------------------
    # Awaited reads/writes
    # -----------------------------

    async def get(self, source_id: str) -> list[Game] | None:
        """Cached games for a source, or None when nothing was ever stored."""

        value = await self.store.get(self.key_for(source_id))
        if value is None:
            return None
        return self._decode(source_id, value)

    async def put(self, source_id: str, games: Sequence[Game]) -> None:
        await self.store.set(self.key_for(source_id), [g.to_dict() for g in games])
        logger.info("Saved %d games for %s", len(games), source_id)

    async def get_fetch_date(self) -> str | None:
        value = await self.store.get(self.fetch_date_key)
        if value is None:
            return None
        return str(value)

    async def put_fetch_date(self, timestamp: str) -> None:
        await self.store.set(self.fetch_date_key, timestamp)
        logger.info("Saved fetch date %s", timestamp)

    # -----------------------------
    # Fire-and-forget writes
    # -----------------------------

    def persist(self, source_id: str, games: Sequence[Game]) -> asyncio.Task[None]:
        return self._spawn(self.put(source_id, list(games)), label=self.key_for(source_id))

    def persist_fetch_date(self, timestamp: str) -> asyncio.Task[None]:
        return self._spawn(self.put_fetch_date(timestamp), label=self.fetch_date_key)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every write started with `persist*`."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _spawn(self, coro: Any, *, label: str) -> asyncio.Task[None]:
        task: asyncio.Task[None] = asyncio.create_task(coro, name=f"cache-write:{label}")
        self._pending.add(task)
        task.add_done_callback(self._on_write_done)
        return task

    def _on_write_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("Cache write %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Cache write %s failed", task.get_name(), exc_info=exc)

    # -----------------------------
    # Decoding
    # -----------------------------

    def _decode(self, source_id: str, value: Any) -> list[Game]:
        if isinstance(value, str):
            # Legacy entries hold the raw CSV export rather than normalized games.
            rows = parse_schedule_csv(value)
            return normalize_rows(source_id, rows, layout=DateLayout.MONTH_DAY_YEAR)
        if isinstance(value, list):
            return [Game.from_dict(item) for item in value]
        raise TypeError(f"Unexpected cached value for {self.key_for(source_id)}: {type(value)}")
