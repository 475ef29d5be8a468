from __future__ import annotations

import re

_whitespace_re = re.compile(r"\s+")
_tab_newline_re = re.compile(r"[\t\n]+")
_meridiem_gap_re = re.compile(r"(\d{1,2}:\d{2})\s+([AaPp][Mm])")


def collapse_whitespace(value: str) -> str:
    return _whitespace_re.sub(" ", value).strip()


def collapse_tabs_newlines(value: str) -> str:
    """Collapse runs of tabs/newlines (as found in header cells) into one space."""

    return _tab_newline_re.sub(" ", value.strip())


def join_meridiem(value: str) -> str:
    """`"7:00  PM"` -> `"7:00PM"`."""

    return _meridiem_gap_re.sub(lambda m: f"{m.group(1)}{m.group(2).upper()}", value)
