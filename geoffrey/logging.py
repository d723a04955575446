"""Logging for geoffrey runs.

Console records are written to stderr as::

    2024-05-01 09:30:12.042 [Info ] Updated docs/guide.md (2 tag(s))

so they never interleave with the sync report printed on stdout. Verbosity
steps up from INFO to DEBUG (``-v``) and TRACE (``-vv``); TRACE additionally
reports every snippet marker seen while extracting regions.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, Optional, TextIO

_LOGGER_NAME = "geoffrey"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVEL_TAGS: Dict[int, str] = {
    TRACE: "[Trace]",
    logging.DEBUG: "[Debug]",
    logging.INFO: "[Info ]",
    logging.WARNING: "[Warn ]",
    logging.ERROR: "[Error]",
    logging.CRITICAL: "[Error]",
}

_VERBOSITY_LEVELS = (logging.INFO, logging.DEBUG, TRACE)


class LevelTagFormatter(logging.Formatter):
    """Formatter rendering millisecond timestamps and fixed-width level tags."""

    default_time_format = "%Y-%m-%d %H:%M:%S"
    default_msec_format = "%s.%03d"

    def __init__(self, fmt: str = "%(asctime)s %(level_tag)s %(message)s") -> None:
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        record.level_tag = _LEVEL_TAGS.get(record.levelno, f"[{record.levelname[:5]:<5}]")
        return super().format(record)


def get_logger(name: str | None = None) -> logging.Logger:
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def level_for(verbosity: int) -> int:
    """Map a ``-v`` count onto a logging level, saturating at TRACE."""
    return _VERBOSITY_LEVELS[max(0, min(verbosity, len(_VERBOSITY_LEVELS) - 1))]


def configure_logging(
    *,
    verbosity: int = 0,
    log_file: Path | None = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Install the console handler and, when requested, a log file handler.

    Calling this again replaces the handlers from the previous call.
    """
    level = level_for(verbosity)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setLevel(level)
    console.setFormatter(LevelTagFormatter())
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            LevelTagFormatter("%(asctime)s %(level_tag)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["LevelTagFormatter", "TRACE", "configure_logging", "get_logger", "level_for"]
