from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from socker_schedules.ingestion.providers.base.types import ScheduleResult
from socker_schedules.ingestion.schedules import ScheduleAggregator

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=12)


def parse_fetch_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def is_stale(fetch_date: str | None, *, now: datetime, max_age: timedelta = DEFAULT_MAX_AGE) -> bool:
    """A missing or unreadable fetch date always counts as stale."""

    fetched = parse_fetch_date(fetch_date)
    if fetched is None:
        return True
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now - fetched > max_age


async def get_schedules(
    aggregator: ScheduleAggregator,
    *,
    max_age: timedelta = DEFAULT_MAX_AGE,
    now: datetime | None = None,
) -> ScheduleResult:
    """Serve from the cache, refreshing first when the stored fetch date is older than `max_age`."""

    cached = await aggregator.from_cache()
    now = now or aggregator.clock()
    if not is_stale(cached.fetch_date, now=now, max_age=max_age):
        return cached

    logger.info("Cached schedules from %s are stale, refreshing", cached.fetch_date)
    return await aggregator.refresh()
