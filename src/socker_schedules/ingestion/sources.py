from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from pydantic import TypeAdapter

from socker_schedules.ingestion.providers.base.registry import SourceRegistry
from socker_schedules.ingestion.providers.base.types import CsvFormStrategy, SourceConfig

LIWSA_SCHEDULE_URL = "https://liwsa.com/webapps/spappz_live/schedule_maint"
VISL_SCHEDULE_URL = "https://visl.org/webapps/spappz_live/schedule_maint"


def _spappz_form(**filters: str | None) -> str:
    """Schedule-maint form body with `cmd=Excel` (CSV export).

    `filters` override the defaults; a None value drops the field from the body.
    """

    fields = {
        "reg_year": "2025",
        "flt_area": "All",
        "season": "All",
        "division": "All",
        "agegroup": "All",
        "team_refno": "All",
        "stype": "All",
        "sname": "All",
        "sstat": "All",
        "fieldref": "All",
        "fdate": "All",
        "tdate": "All",
        "dow": "All",
        "start_time": "All",
        "sortby1": "sched_time",
        "sortby2": "sched_type",
        "sortby3": "sched_name",
        "sortby4": "None",
        "cmd": "Excel",
        "appid": "liwsa",
        "returnto": "",
        "firsttime": "0",
    }
    for key, value in filters.items():
        if value is None:
            fields.pop(key, None)
        else:
            fields[key] = value
    return "&".join(f"{k}={v}" for k, v in fields.items())


DEFAULT_SOURCES: tuple[SourceConfig, ...] = (
    SourceConfig(
        id="nad",
        display_name="Nad",
        strategy=CsvFormStrategy(
            url=VISL_SCHEDULE_URL,
            post_data=_spappz_form(
                flt_area="cas",
                division="2",
                agegroup=None,
                sched_pool="All",
                tdate="",
                appid="visl",
            ),
        ),
    ),
    SourceConfig(
        id="mo",
        display_name="Mo",
        strategy=CsvFormStrategy(
            url=LIWSA_SCHEDULE_URL,
            post_data=_spappz_form(flt_area="sffc", division="tiereddiv", team_refno="38"),
        ),
    ),
    SourceConfig(
        id="kat",
        display_name="Kat",
        strategy=CsvFormStrategy(
            url=LIWSA_SCHEDULE_URL,
            post_data=_spappz_form(flt_area="cfc", division="o30", team_refno="24"),
        ),
    ),
    SourceConfig(
        id="tash",
        display_name="Tash",
        strategy=CsvFormStrategy(
            url=LIWSA_SCHEDULE_URL,
            post_data=_spappz_form(flt_area="sffc", division="tiereddiv", team_refno="57"),
        ),
    ),
)

_sources_adapter = TypeAdapter(list[SourceConfig])


def load_sources_file(path: Path) -> list[SourceConfig]:
    """
    Read source definitions from a JSON list, e.g.

        [{"id": "kat", "display_name": "Kat",
          "strategy": {"kind": "html-scrape", "url": "...", "team_name": "Strikers"}}]
    """

    return _sources_adapter.validate_python(json.loads(path.read_text(encoding="utf-8")))


def build_registry(
    sources: Sequence[SourceConfig] | None = None,
    *,
    sources_file: Path | None = None,
) -> SourceRegistry:
    if sources is None:
        sources = load_sources_file(sources_file) if sources_file else DEFAULT_SOURCES
    return SourceRegistry(sources)
