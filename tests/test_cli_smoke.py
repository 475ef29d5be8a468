from __future__ import annotations

import json

from typer.testing import CliRunner

from socker_schedules.cli.app import app
from socker_schedules.core.config import settings


def test_cli_help_smoke() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "refresh" in result.stdout
    assert "show" in result.stdout


def test_cli_lists_default_sources() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["sources"])
    assert result.exit_code == 0
    assert "nad\tcsv-form" in result.stdout


def test_cli_show_reads_empty_cache(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(settings, "database_url", f"sqlite+pysqlite:///{tmp_path / 'cache.db'}")

    runner = CliRunner()
    result = runner.invoke(app, ["show"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"games": [], "fetchDate": None}
