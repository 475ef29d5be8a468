from __future__ import annotations

import csv
import io

from socker_schedules.ingestion.providers.base.errors import ParseError

RawRow = dict[str, str]

REQUIRED_COLUMNS: tuple[str, ...] = ("Date", "Time", "field_name", "home_team", "visit_team")


def parse_schedule_csv(text: str) -> list[RawRow]:
    """Parse a schedule export (header row first) into one dict per game row.

    Column order is irrelevant; any column outside REQUIRED_COLUMNS is carried
    through untouched and ignored by the normalizer.
    """

    if not text.strip():
        raise ParseError("Empty schedule export")

    # Exports sometimes start with a BOM.
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")), strict=True)

    try:
        header = reader.fieldnames
        if header is None:
            raise ParseError("Schedule export has no header row")

        columns = {name.strip() for name in header}
        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise ParseError(f"Schedule export missing columns: {', '.join(missing)}")

        rows: list[RawRow] = []
        for line_no, raw in enumerate(reader, start=2):
            if None in raw:
                raise ParseError(f"Row {line_no} has more cells than the header")
            row = {k.strip(): (v or "") for k, v in raw.items()}
            if not any(v.strip() for v in row.values()):
                continue
            rows.append(row)
    except csv.Error as e:
        raise ParseError(f"Malformed schedule export: {e}") from e

    return rows
