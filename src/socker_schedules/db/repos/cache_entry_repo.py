from __future__ import annotations

from typing import Any

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from socker_schedules.db.models.cache_entry import CacheEntry

_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class CacheEntryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, key: str) -> CacheEntry | None:
        return self.session.get(CacheEntry, key)

    def get_value(self, key: str) -> Any | None:
        entry = self.get(key)
        return None if entry is None else entry.value_json

    def put(self, key: str, value: Any, *, flush: bool = True) -> None:
        """Overwrite the whole value stored under `key` (insert if absent).

        Uses INSERT ... ON CONFLICT DO UPDATE where the dialect has it, so two
        writers creating the same key don't collide.
        """

        insert = _UPSERT_INSERTS.get(self.session.get_bind().dialect.name)
        if insert is None:
            self.session.merge(CacheEntry(key=key, value_json=value))
        else:
            stmt = insert(CacheEntry).values(key=key, value_json=value)
            stmt = stmt.on_conflict_do_update(
                index_elements=[CacheEntry.key],
                set_={"value_json": stmt.excluded.value_json, "updated_at": func.now()},
            )
            self.session.execute(stmt)
        if flush:
            self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
