from __future__ import annotations

import asyncio
import json
from datetime import timedelta

import typer

import socker_schedules.db.models  # noqa: F401
from socker_schedules.cli.common import aggregator_scope
from socker_schedules.core.config import settings
from socker_schedules.core.logging import setup_logging
from socker_schedules.db import Base, DatabaseConfig, create_db_engine
from socker_schedules.ingestion.providers.base.types import ScheduleResult
from socker_schedules.ingestion.sources import build_registry
from socker_schedules.ingestion.staleness import get_schedules

app = typer.Typer(no_args_is_help=True, help="Fetch, cache and serve game schedules.")


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level."),
) -> None:
    setup_logging(log_level)


def _echo_result(result: ScheduleResult) -> None:
    typer.echo(json.dumps(result.to_dict(), indent=2))


@app.command("init-db")
def init_db_cmd() -> None:
    """Create the cache table in the configured database."""

    engine = create_db_engine(
        DatabaseConfig(database_url=settings.database_url, echo=settings.db_echo)
    )
    try:
        Base.metadata.create_all(engine)
    finally:
        engine.dispose()
    typer.echo(f"Initialized cache tables at {settings.database_url}")


@app.command("sources")
def sources_cmd() -> None:
    """List the configured schedule sources."""

    for source in build_registry(sources_file=settings.sources_file):
        typer.echo(f"{source.id}\t{source.strategy.kind}\t{source.display_name}")


@app.command("refresh")
def refresh_cmd() -> None:
    """Fetch every source now, update the cache and print the merged schedule."""

    async def run() -> ScheduleResult:
        async with aggregator_scope() as aggregator:
            return await aggregator.refresh()

    result = asyncio.run(run())
    _echo_result(result)
    if result.failures:
        typer.echo(f"{len(result.failures)} source(s) failed: {', '.join(result.failures)}", err=True)


@app.command("show")
def show_cmd() -> None:
    """Print the cached schedule without contacting any upstream site."""

    async def run() -> ScheduleResult:
        async with aggregator_scope() as aggregator:
            return await aggregator.from_cache()

    _echo_result(asyncio.run(run()))


@app.command("games")
def games_cmd(
    max_age_hours: float = typer.Option(
        settings.stale_after_hours,
        "--max-age-hours",
        help="Refresh first when the cached fetch date is older than this.",
    ),
) -> None:
    """Print the schedule, refreshing only when the cache is stale."""

    async def run() -> ScheduleResult:
        async with aggregator_scope() as aggregator:
            return await get_schedules(aggregator, max_age=timedelta(hours=max_age_hours))

    _echo_result(asyncio.run(run()))
