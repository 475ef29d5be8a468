"""Logging setup for the CLI.

Modules log through the standard pattern:

    import logging
    logger = logging.getLogger(__name__)

and the entry point calls `setup_logging()` once.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def setup_logging(level: str | int = "INFO") -> None:
    global _configured

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger("socker_schedules")
    root.setLevel(level)

    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # Per-request lines from httpx are noise at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
