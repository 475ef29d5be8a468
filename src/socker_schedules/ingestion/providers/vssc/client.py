from __future__ import annotations

from dataclasses import dataclass

from socker_schedules.ingestion.normalize import layout_for
from socker_schedules.ingestion.providers.base.client import AsyncHttpClient
from socker_schedules.ingestion.providers.base.types import Game, HtmlScrapeStrategy

from .parser import parse_schedule_html


@dataclass
class VsscClient:
    """Client for league schedule pages laid out as date groups of field-by-time tables."""

    http: AsyncHttpClient

    async def fetch_games(self, source_id: str, strategy: HtmlScrapeStrategy) -> list[Game]:
        html = await self.http.get_text(strategy.url)
        return parse_schedule_html(
            html,
            source_id=source_id,
            team_name=strategy.team_name,
            layout=layout_for(strategy),
        )
