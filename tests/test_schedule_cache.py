from __future__ import annotations

import asyncio

import sqlalchemy as sa

import socker_schedules.db.models  # noqa: F401
from socker_schedules.cache.gateway import ScheduleCache
from socker_schedules.cache.store import MemoryKeyValueStore, SqlKeyValueStore
from socker_schedules.db import Base, DatabaseConfig, create_db_engine, create_session_factory
from socker_schedules.db.repos.cache_entry_repo import CacheEntryRepository
from socker_schedules.ingestion.providers.base.types import Game

GAME = Game(date="2022-09-23 7:00PM", who="nad", field="Field 3", home="Team A", away="Team B")


def _sql_store() -> SqlKeyValueStore:
    engine = create_db_engine(DatabaseConfig(database_url="sqlite+pysqlite:///:memory:"))
    Base.metadata.create_all(engine)
    return SqlKeyValueStore(create_session_factory(engine))


def test_absent_source_reads_as_none() -> None:
    cache = ScheduleCache(MemoryKeyValueStore())

    async def run() -> tuple[list[Game] | None, str | None]:
        return await cache.get("nad"), await cache.get_fetch_date()

    assert asyncio.run(run()) == (None, None)


def test_put_and_get_use_namespaced_keys() -> None:
    store = MemoryKeyValueStore()
    cache = ScheduleCache(store, namespace="socker-schedules")

    async def run() -> list[Game] | None:
        await cache.put("nad", [GAME])
        await cache.put_fetch_date("2023-01-01T00:00:00+00:00")
        return await cache.get("nad")

    assert asyncio.run(run()) == [GAME]
    assert sorted(store.keys()) == ["socker-schedules:fetch-date", "socker-schedules:nad"]


def test_put_overwrites_whole_entry() -> None:
    cache = ScheduleCache(MemoryKeyValueStore())
    other = Game(date="2022-10-01 9:00AM", who="nad", field="F", home="C", away="D")

    async def run() -> list[Game] | None:
        await cache.put("nad", [GAME, other])
        await cache.put("nad", [other])
        return await cache.get("nad")

    assert asyncio.run(run()) == [other]


def test_legacy_raw_csv_entries_are_normalized_on_read() -> None:
    store = MemoryKeyValueStore(
        {
            "socker-schedules:nad": (
                "Date,Time,field_name,home_team,visit_team\n"
                "9/23/2022,7:00  PM,Field 3,Team A,Team B\n"
            )
        }
    )
    cache = ScheduleCache(store)

    assert asyncio.run(cache.get("nad")) == [GAME]


def test_persist_returns_task_and_drain_waits() -> None:
    store = MemoryKeyValueStore()
    cache = ScheduleCache(store)

    async def run() -> tuple[bool, int, int]:
        task = cache.persist("nad", [GAME])
        cache.persist_fetch_date("2023-01-01T00:00:00+00:00")
        is_task = isinstance(task, asyncio.Task)
        before = cache.pending
        await cache.drain()
        return is_task, before, cache.pending

    is_task, before, after = asyncio.run(run())

    assert is_task
    assert before == 2
    assert after == 0
    assert sorted(store.keys()) == ["socker-schedules:fetch-date", "socker-schedules:nad"]


def test_failed_background_write_is_logged_not_raised(caplog) -> None:
    class BrokenStore(MemoryKeyValueStore):
        async def set(self, key: str, value: object) -> None:
            raise RuntimeError("store offline")

    cache = ScheduleCache(BrokenStore())

    async def run() -> None:
        cache.persist("nad", [GAME])
        await cache.drain()

    asyncio.run(run())

    assert "socker-schedules:nad" in caplog.text
    assert cache.pending == 0


def test_sql_store_round_trip_and_overwrite() -> None:
    cache = ScheduleCache(_sql_store())
    other = Game(date="2022-10-01 9:00AM", who="nad", field="F", home="C", away="D")

    async def run() -> tuple[list[Game] | None, list[Game] | None, str | None]:
        missing = await cache.get("mo")
        await cache.put("nad", [GAME])
        await cache.put("nad", [other])
        await cache.put_fetch_date("2023-01-01T00:00:00+00:00")
        return missing, await cache.get("nad"), await cache.get_fetch_date()

    missing, games, fetch_date = asyncio.run(run())

    assert missing is None
    assert games == [other]
    assert fetch_date == "2023-01-01T00:00:00+00:00"


def test_sql_store_uses_cache_entries_table() -> None:
    engine = create_db_engine(DatabaseConfig(database_url="sqlite+pysqlite:///:memory:"))
    Base.metadata.create_all(engine)
    cache = ScheduleCache(SqlKeyValueStore(create_session_factory(engine)), namespace="ns")

    asyncio.run(cache.put("kat", [GAME]))

    with engine.connect() as conn:
        keys = conn.execute(sa.text('SELECT "key" FROM cache_entries')).scalars().all()
    assert keys == ["ns:kat"]


def test_legacy_entry_with_unscheduled_row_keeps_the_rest() -> None:
    store = MemoryKeyValueStore(
        {
            "socker-schedules:nad": (
                "Date,Time,field_name,home_team,visit_team\n"
                "9/23/2022,7:00  PM,Field 3,Team A,Team B\n"
                "9/30/2022,TBD,Field 3,Team A,Team C\n"
            )
        }
    )

    assert asyncio.run(ScheduleCache(store).get("nad")) == [GAME]


def test_repository_put_upserts_existing_key_from_another_session() -> None:
    engine = create_db_engine(DatabaseConfig(database_url="sqlite+pysqlite:///:memory:"))
    Base.metadata.create_all(engine)
    session_factory = create_session_factory(engine)

    with session_factory() as first, session_factory() as second:
        first_repo = CacheEntryRepository(first)
        second_repo = CacheEntryRepository(second)
        first_repo.put("ns:nad", ["first"])
        first_repo.commit()
        second_repo.put("ns:nad", ["second"])
        second_repo.commit()

    with session_factory() as session:
        assert CacheEntryRepository(session).get_value("ns:nad") == ["second"]

    with engine.connect() as conn:
        count = conn.execute(sa.text("SELECT COUNT(*) FROM cache_entries")).scalar_one()
    assert count == 1
