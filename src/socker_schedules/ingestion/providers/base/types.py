from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from dataclasses import field as dataclass_field
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_slug_re = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


@dataclass(frozen=True)
class Game:
    """
    Canonical schedule record shared by every source.

    `date` is always `YYYY-MM-DD H:MMAM|PM` (see `normalize.CANONICAL_DATE_FORMAT`).
    """

    date: str
    who: str
    field: str
    home: str
    away: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Game:
        return cls(
            date=str(data["date"]),
            who=str(data["who"]),
            field=str(data["field"]),
            home=str(data["home"]),
            away=str(data["away"]),
        )


class CsvFormStrategy(BaseModel):
    """Form-encoded POST to a schedule backend that answers with a CSV export."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["csv-form"] = "csv-form"
    url: str
    post_data: str


class HtmlScrapeStrategy(BaseModel):
    """GET a schedule page and keep the games involving `team_name`."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["html-scrape"] = "html-scrape"
    url: str
    team_name: str


FetchStrategy = Annotated[CsvFormStrategy | HtmlScrapeStrategy, Field(discriminator="kind")]


class SourceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    strategy: FetchStrategy

    @field_validator("id")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        if not _slug_re.match(value):
            raise ValueError(f"Source id must be a lowercase slug, got {value!r}")
        return value


@dataclass(frozen=True)
class ScheduleResult:
    """
    Consumer-facing result of a refresh or a cache read.

    `failures` maps source id -> error message for sources whose fetch failed
    during a refresh; those sources contribute no games to `games`.
    """

    games: list[Game]
    fetch_date: str | None
    failures: dict[str, str] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "games": [g.to_dict() for g in self.games],
            "fetchDate": self.fetch_date,
        }
        if self.failures:
            out["failures"] = dict(self.failures)
        return out
