from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from socker_schedules.db.base import Base, TimestampMixin


class CacheEntry(Base, TimestampMixin):
    """One key-value pair of the schedule cache (`<namespace>:<source_id>`, `<namespace>:fetch-date`)."""

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)

    # Game list, ISO timestamp string, or legacy raw CSV text.
    value_json: Mapped[Any] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
    )
