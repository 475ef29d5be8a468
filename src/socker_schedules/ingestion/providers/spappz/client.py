from __future__ import annotations

from dataclasses import dataclass

from socker_schedules.ingestion.normalize import layout_for, normalize_rows
from socker_schedules.ingestion.providers.base.client import AsyncHttpClient
from socker_schedules.ingestion.providers.base.types import CsvFormStrategy, Game

from .parser import RawRow, parse_schedule_csv


@dataclass
class SpappzClient:
    """
    Client for `spappz_live/schedule_maint` schedule backends.

    The backend renders a filter form; posting it back with `cmd=Excel` returns
    the filtered schedule as CSV instead of HTML.
    """

    http: AsyncHttpClient

    async def fetch_csv(self, strategy: CsvFormStrategy) -> str:
        return await self.http.post_form_text(strategy.url, strategy.post_data)

    async def fetch_rows(self, strategy: CsvFormStrategy) -> list[RawRow]:
        return parse_schedule_csv(await self.fetch_csv(strategy))

    async def fetch_games(self, source_id: str, strategy: CsvFormStrategy) -> list[Game]:
        rows = await self.fetch_rows(strategy)
        return normalize_rows(source_id, rows, layout=layout_for(strategy))
