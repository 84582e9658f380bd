"""structlog setup.

The terminal belongs to the dashboard, so log lines go to a file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

import structlog
from platformdirs import user_log_dir

from lazyadb.config import APP_NAME

DEFAULT_LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / f"{APP_NAME}.log"


def level_number(level: str) -> int:
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level}")
    return value


def configure_logging(path: Path | None = None, level: str = "info") -> TextIO:
    """Route structlog output to `path` and return the open handle."""
    log_path = path or DEFAULT_LOG_PATH
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handle = log_path.open("a", encoding="utf-8")
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_number(level)),
        logger_factory=structlog.WriteLoggerFactory(file=handle),
        cache_logger_on_first_use=False,
    )
    return handle
