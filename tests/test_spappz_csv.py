from __future__ import annotations

import asyncio

import httpx
import pytest

from socker_schedules.ingestion.providers.base.client import AsyncHttpClient
from socker_schedules.ingestion.providers.base.errors import FetchError, ParseError
from socker_schedules.ingestion.providers.base.types import CsvFormStrategy, Game
from socker_schedules.ingestion.providers.spappz.client import SpappzClient
from socker_schedules.ingestion.providers.spappz.parser import parse_schedule_csv

EXPORT = (
    "sched_type,Date,Time,division_name,field_name,home_team,visit_team\n"
    "League,9/23/2022,7:00  PM,Division 3,Field 3,Team A,Team B\n"
    "League,9/30/2022,10:15 AM,Division 3,Field 1,Team C,Team A\n"
)


def test_parse_schedule_csv_maps_rows_by_header() -> None:
    rows = parse_schedule_csv(EXPORT)

    assert len(rows) == 2
    assert rows[0]["Date"] == "9/23/2022"
    assert rows[0]["field_name"] == "Field 3"
    assert rows[1]["visit_team"] == "Team A"


def test_parse_schedule_csv_ignores_column_order_and_blank_lines() -> None:
    text = "visit_team,home_team,field_name,Time,Date\nB,A,F,7:00 PM,9/23/2022\n\n"

    rows = parse_schedule_csv(text)

    assert rows == [
        {"visit_team": "B", "home_team": "A", "field_name": "F", "Time": "7:00 PM", "Date": "9/23/2022"}
    ]


def test_parse_schedule_csv_requires_columns() -> None:
    with pytest.raises(ParseError, match="visit_team"):
        parse_schedule_csv("Date,Time,field_name,home_team\n9/23/2022,7:00 PM,F,A\n")


def test_parse_schedule_csv_rejects_html_error_page() -> None:
    with pytest.raises(ParseError):
        parse_schedule_csv("<html><body>Session expired</body></html>")


def test_parse_schedule_csv_rejects_ragged_rows() -> None:
    with pytest.raises(ParseError):
        parse_schedule_csv("Date,Time,field_name,home_team,visit_team\n1/1/2023,1:00 PM,F,A,B,extra\n")


def test_parse_schedule_csv_rejects_empty_body() -> None:
    with pytest.raises(ParseError):
        parse_schedule_csv("   \n")


def test_spappz_client_posts_form_and_normalizes() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=EXPORT)

    strategy = CsvFormStrategy(
        url="https://league.example/webapps/spappz_live/schedule_maint",
        post_data="reg_year=2023&division=3&cmd=Excel",
    )

    async def run() -> list[Game]:
        async with AsyncHttpClient(transport=httpx.MockTransport(handler)) as http:
            return await SpappzClient(http=http).fetch_games("nad", strategy)

    games = asyncio.run(run())

    assert seen[0].method == "POST"
    assert seen[0].headers["content-type"] == "application/x-www-form-urlencoded"
    assert seen[0].content == b"reg_year=2023&division=3&cmd=Excel"
    assert games[0] == Game(
        date="2022-09-23 7:00PM", who="nad", field="Field 3", home="Team A", away="Team B"
    )
    assert games[1].date == "2022-09-30 10:15AM"


def test_spappz_client_raises_fetch_error_on_http_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not here")

    strategy = CsvFormStrategy(url="https://league.example/schedule", post_data="cmd=Excel")

    async def run() -> None:
        async with AsyncHttpClient(transport=httpx.MockTransport(handler)) as http:
            await SpappzClient(http=http).fetch_rows(strategy)

    with pytest.raises(FetchError, match="404"):
        asyncio.run(run())


def test_spappz_client_skips_rows_with_unreadable_time(caplog) -> None:
    export = (
        "Date,Time,field_name,home_team,visit_team\n"
        "9/23/2022,7:00 PM,F1,A,B\n"
        "9/30/2022,TBD,F1,A,C\n"
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=export)

    strategy = CsvFormStrategy(url="https://league.example/schedule", post_data="cmd=Excel")

    async def run() -> list[Game]:
        async with AsyncHttpClient(transport=httpx.MockTransport(handler)) as http:
            return await SpappzClient(http=http).fetch_games("nad", strategy)

    games = asyncio.run(run())

    assert games == [Game(date="2022-09-23 7:00PM", who="nad", field="F1", home="A", away="B")]
    assert "nad data row 2" in caplog.text
    assert "TBD" in caplog.text
