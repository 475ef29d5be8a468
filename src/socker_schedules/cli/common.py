from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import socker_schedules.db.models  # noqa: F401
from socker_schedules.cache.gateway import ScheduleCache
from socker_schedules.cache.store import SqlKeyValueStore
from socker_schedules.core.config import Settings, settings
from socker_schedules.db import Base, DatabaseConfig, create_db_engine, create_session_factory
from socker_schedules.ingestion.providers.base.client import AsyncHttpClient
from socker_schedules.ingestion.schedules import ScheduleAggregator
from socker_schedules.ingestion.sources import build_registry


@asynccontextmanager
async def aggregator_scope(cfg: Settings = settings) -> AsyncIterator[ScheduleAggregator]:
    """
    Aggregator wired to the configured DB cache and sources (cache table created if missing).
    Waits for outstanding cache writes and closes the HTTP client on exit.
    """
    engine = create_db_engine(DatabaseConfig(database_url=cfg.database_url, echo=cfg.db_echo))
    Base.metadata.create_all(engine)
    cache = ScheduleCache(
        SqlKeyValueStore(create_session_factory(engine)),
        namespace=cfg.cache_namespace,
    )
    http = AsyncHttpClient(
        timeout_s=cfg.http_timeout_s,
        connect_timeout_s=cfg.http_connect_timeout_s,
        max_attempts=cfg.http_max_attempts,
        backoff_s=cfg.http_backoff_s,
    )
    aggregator = ScheduleAggregator(
        registry=build_registry(sources_file=cfg.sources_file),
        cache=cache,
        http=http,
    )
    try:
        yield aggregator
    finally:
        await cache.drain()
        await http.aclose()
        engine.dispose()
