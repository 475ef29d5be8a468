from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

import httpx

from socker_schedules.cache.gateway import ScheduleCache, iso_timestamp
from socker_schedules.ingestion.normalize import parse_canonical_date
from socker_schedules.ingestion.providers.base.client import AsyncHttpClient
from socker_schedules.ingestion.providers.base.errors import ScheduleError
from socker_schedules.ingestion.providers.base.registry import SourceRegistry
from socker_schedules.ingestion.providers.base.types import (
    CsvFormStrategy,
    Game,
    HtmlScrapeStrategy,
    ScheduleResult,
    SourceConfig,
)
from socker_schedules.ingestion.providers.spappz.client import SpappzClient
from socker_schedules.ingestion.providers.vssc.client import VsscClient

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def merge_games(per_source: Sequence[Sequence[Game]]) -> list[Game]:
    """Flatten per-source lists and order by game time.

    `sorted` is stable, so games at the same time keep their source/input order.
    """

    games = [g for source_games in per_source for g in source_games]
    return sorted(games, key=lambda g: parse_canonical_date(g.date))


@dataclass(frozen=True)
class SourceOutcome:
    source_id: str
    games: list[Game] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ScheduleAggregator:
    """
    Fetches every registered source, normalizes, caches and merges.

    Two entry points:
      - `refresh()`     network fetch of all sources, write-through to the cache
      - `from_cache()`  cache-only read, never touches the network
    """

    registry: SourceRegistry
    cache: ScheduleCache
    http: AsyncHttpClient
    clock: Callable[[], datetime] = _utcnow

    def __post_init__(self) -> None:
        self._spappz = SpappzClient(http=self.http)
        self._vssc = VsscClient(http=self.http)

    async def fetch_source(self, source: SourceConfig) -> list[Game]:
        strategy = source.strategy
        match strategy:
            case CsvFormStrategy():
                return await self._spappz.fetch_games(source.id, strategy)
            case HtmlScrapeStrategy():
                return await self._vssc.fetch_games(source.id, strategy)
        raise TypeError(f"Unhandled fetch strategy: {type(strategy).__name__}")

    async def _refresh_source(self, source: SourceConfig) -> SourceOutcome:
        try:
            games = await self.fetch_source(source)
        except (ScheduleError, httpx.HTTPError) as e:
            # Leave the previous cache entry for this source untouched.
            logger.warning("Fetch failed for %s: %s", source.id, e)
            return SourceOutcome(source_id=source.id, error=f"{type(e).__name__}: {e}")

        self.cache.persist(source.id, games)
        return SourceOutcome(source_id=source.id, games=games)

    async def refresh(self) -> ScheduleResult:
        """
        One refresh cycle: fetch all sources concurrently, persist, merge.

        The fetch timestamp and per-source cache writes are started but not
        awaited (see ScheduleCache). A failed source is reported in `failures`
        and contributes no games; the other sources are unaffected.
        """

        fetch_date = iso_timestamp(self.clock())
        self.cache.persist_fetch_date(fetch_date)

        outcomes = await asyncio.gather(*(self._refresh_source(s) for s in self.registry))

        failures = {o.source_id: o.error for o in outcomes if o.error is not None}
        games = merge_games([o.games for o in outcomes if o.ok])

        logger.info(
            "Refreshed %d/%d sources, %d games",
            len(outcomes) - len(failures),
            len(outcomes),
            len(games),
        )
        return ScheduleResult(games=games, fetch_date=fetch_date, failures=failures)

    async def _cached_source(self, source_id: str) -> SourceOutcome:
        try:
            games = await self.cache.get(source_id)
        except (ScheduleError, KeyError, TypeError, ValueError) as e:
            logger.warning("Unreadable cache entry for %s: %s", source_id, e)
            return SourceOutcome(source_id=source_id, error=f"{type(e).__name__}: {e}")
        return SourceOutcome(source_id=source_id, games=games or [])

    async def from_cache(self) -> ScheduleResult:
        """Serve the last stored games; a source with nothing cached contributes zero games."""

        source_ids = self.registry.list_sources()
        *outcomes, fetch_date = await asyncio.gather(
            *(self._cached_source(s) for s in source_ids),
            self.cache.get_fetch_date(),
        )

        failures = {o.source_id: o.error for o in outcomes if o.error is not None}
        games = merge_games([o.games for o in outcomes])
        return ScheduleResult(games=games, fetch_date=fetch_date, failures=failures)
