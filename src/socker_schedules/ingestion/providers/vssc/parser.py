from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from socker_schedules.core.text import collapse_tabs_newlines
from socker_schedules.ingestion.normalize import DateLayout, canonical_date
from socker_schedules.ingestion.providers.base.errors import FieldNotFoundError, ParseError
from socker_schedules.ingestion.providers.base.types import Game


def _text(el: Tag | None) -> str:
    if el is None:
        return ""
    return el.get_text().strip()


def _field_name(headers: list[Tag], column: int, *, date: str) -> str:
    # Header 0 labels the time column, so data column i lines up with header i + 1.
    idx = column + 1
    if idx >= len(headers):
        raise FieldNotFoundError(date=date, column=column)
    name = collapse_tabs_newlines(headers[idx].get_text())
    if not name:
        raise FieldNotFoundError(date=date, column=column)
    return name


def _team_names(cell: Tag) -> tuple[str, str] | None:
    anchors = cell.find_all("a", limit=2)
    if len(anchors) < 2:
        return None
    home, away = _text(anchors[0]), _text(anchors[1])
    if not home or not away:
        return None
    return home, away


def team_matches(game: Game, team_name: str) -> bool:
    """Substring match: upstream names carry qualifiers like "(O30)" or "FC"."""

    return team_name in game.home or team_name in game.away


def parse_schedule_html(
    html: str,
    *,
    source_id: str,
    team_name: str,
    layout: DateLayout = DateLayout.ISO,
) -> list[Game]:
    """
    Extract games for `team_name` from a schedule page.

    Page contract:
        .gameDate[data-date]              one per calendar day
          th                              "Time", then one per field
          .scheduleTable tr               one per time slot (header rows have no td)
            td.gameTime                   "7:00 PM"
            td (one per field)            two <a> team links when a game is scheduled
    """

    soup = BeautifulSoup(html, "html.parser")
    games: list[Game] = []

    for group in soup.select(".gameDate"):
        date = group.get("data-date")
        if not isinstance(date, str) or not date.strip():
            raise ParseError("Schedule date group is missing its data-date attribute")
        date = date.strip()

        headers = group.find_all("th")

        # html.parser keeps the markup as written, so rows may or may not sit in a tbody.
        for row in group.select(".scheduleTable tr"):
            cells = row.find_all("td")[1:]
            if not cells:
                continue

            time_text = _text(row.select_one(".gameTime"))
            game_date: str | None = None

            for column, cell in enumerate(cells):
                field = _field_name(headers, column, date=date)
                teams = _team_names(cell)
                if teams is None:
                    continue

                if game_date is None:
                    game_date = canonical_date(date, time_text, layout)

                game = Game(
                    date=game_date,
                    who=source_id,
                    field=field,
                    home=teams[0],
                    away=teams[1],
                )
                if team_matches(game, team_name):
                    games.append(game)

    return games
