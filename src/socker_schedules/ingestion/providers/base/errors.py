from __future__ import annotations


class ScheduleError(RuntimeError):
    """Base exception for schedule fetch/normalize failures."""


class FetchError(ScheduleError):
    """HTTP/network/transport layer failures (timeouts, connection errors, non-2xx, etc.)."""


class ParseError(ScheduleError):
    """Upstream payload was not the expected CSV / document structure."""


class FieldNotFoundError(ParseError):
    """A schedule page data column has no matching header cell."""

    def __init__(self, *, date: str, column: int) -> None:
        self.date = date
        self.column = column
        super().__init__(f"No field header for column {column} in date group {date!r}")


class UnknownSource(ScheduleError, KeyError):
    """A source id outside the configured set was requested."""

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        super().__init__(f"Unknown schedule source: {source_id!r}")

    def __str__(self) -> str:
        return str(self.args[0])
