from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from enum import StrEnum

from socker_schedules.core.text import collapse_whitespace, join_meridiem
from socker_schedules.ingestion.providers.base.errors import ParseError
from socker_schedules.ingestion.providers.base.types import (
    CsvFormStrategy,
    FetchStrategy,
    Game,
    HtmlScrapeStrategy,
)

logger = logging.getLogger(__name__)

CANONICAL_DATE_FORMAT = "%Y-%m-%d %I:%M%p"

_mdy_re = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_iso_prefix_re = re.compile(r"^(\d{4}-\d{2}-\d{2})")
_time_re = re.compile(r"^0?(\d{1,2}):(\d{2})(AM|PM)$")


class DateLayout(StrEnum):
    # "9/23/2022" date cell + separate "7:00  PM" time cell (form-export CSV)
    MONTH_DAY_YEAR = "month-day-year"
    # "2022-09-23" data attribute + time text (schedule pages)
    ISO = "iso"


def layout_for(strategy: FetchStrategy) -> DateLayout:
    match strategy:
        case CsvFormStrategy():
            return DateLayout.MONTH_DAY_YEAR
        case HtmlScrapeStrategy():
            return DateLayout.ISO
    raise TypeError(f"Unhandled fetch strategy: {type(strategy).__name__}")


def clean_time(value: str) -> str:
    """Collapse spacing in an `H:MM AM/PM` value: `" 07:00  pm"` -> `"7:00PM"`."""

    v = join_meridiem(collapse_whitespace(value)).upper()
    m = _time_re.match(v)
    if m is None:
        raise ParseError(f"Unrecognized time of day: {value!r}")
    return f"{int(m.group(1))}:{m.group(2)}{m.group(3)}"


def _date_part(value: str, layout: DateLayout) -> str:
    v = collapse_whitespace(value)
    if layout is DateLayout.MONTH_DAY_YEAR:
        m = _mdy_re.match(v)
        if m is None:
            raise ParseError(f"Expected M/D/YYYY date, got {value!r}")
        month, day, year = (int(g) for g in m.groups())
        return f"{year:04d}-{month:02d}-{day:02d}"

    m = _iso_prefix_re.match(v)
    if m is None:
        raise ParseError(f"Expected YYYY-MM-DD date, got {value!r}")
    return m.group(1)


def canonical_date(date: str, time: str, layout: DateLayout) -> str:
    """Join a raw date and time into the canonical `YYYY-MM-DD H:MMAM` form."""

    out = f"{_date_part(date, layout)} {clean_time(time)}"
    # Rejects impossible calendar dates such as 2/30/2023.
    try:
        datetime.strptime(out, CANONICAL_DATE_FORMAT)
    except ValueError as e:
        raise ParseError(f"Invalid game date {date!r} {time!r}") from e
    return out


def parse_canonical_date(value: str) -> datetime:
    return datetime.strptime(value, CANONICAL_DATE_FORMAT)


def normalize(
    source_id: str,
    row: Mapping[str, str],
    *,
    layout: DateLayout = DateLayout.MONTH_DAY_YEAR,
) -> Game:
    """
    Map one raw form-export row into a Game.

    Required keys: Date, Time, field_name, home_team, visit_team (a missing key
    raises KeyError). Other columns are ignored.
    """

    return Game(
        date=canonical_date(row["Date"], row["Time"], layout),
        who=source_id,
        field=row["field_name"].strip(),
        home=row["home_team"].strip(),
        away=row["visit_team"].strip(),
    )


def normalize_rows(
    source_id: str,
    rows: Iterable[Mapping[str, str]],
    *,
    layout: DateLayout = DateLayout.MONTH_DAY_YEAR,
) -> list[Game]:
    """
    Normalize every row, skipping (and logging) rows whose date/time can't be read,
    e.g. a "TBD" time on a not-yet-scheduled game.
    """

    games: list[Game] = []
    for row_no, row in enumerate(rows, start=1):
        try:
            games.append(normalize(source_id, row, layout=layout))
        except ParseError as e:
            logger.warning("Skipping %s data row %d: %s", source_id, row_no, e)
    return games
