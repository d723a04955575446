"""Tests for geoffrey.logging."""

from __future__ import annotations

import io
import logging
import re
from pathlib import Path

import pytest

from geoffrey.logging import TRACE, configure_logging, get_logger, level_for
from geoffrey.markers import extract

_CONSOLE_LINE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3} \[(\w+ *)\] (.*)$")


@pytest.fixture(autouse=True)
def _reset_geoffrey_logger():
    yield
    logger = logging.getLogger("geoffrey")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.mark.parametrize(
    "verbosity, level",
    [(0, logging.INFO), (1, logging.DEBUG), (2, TRACE), (5, TRACE), (-1, logging.INFO)],
)
def test_level_for_steps_through_verbosity(verbosity: int, level: int) -> None:
    assert level_for(verbosity) == level


def test_console_records_carry_timestamp_and_level_tag() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)

    get_logger("orchestrator").info("Updated %s", "docs/guide.md")
    get_logger("orchestrator").warning("careful")
    get_logger("orchestrator").debug("hidden")

    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    tags = [_CONSOLE_LINE.match(line).groups() for line in lines]
    assert tags == [("Info ", "Updated docs/guide.md"), ("Warn ", "careful")]


def test_trace_verbosity_reports_markers() -> None:
    stream = io.StringIO()
    configure_logging(verbosity=2, stream=stream)

    extract("//! [setup]\nint x;\n//! [setup]\n")

    output = stream.getvalue()
    assert "[Trace] Marker 'setup' at line 1" in output
    assert "[Trace] Marker 'setup' at line 3" in output
    assert "[Debug] Extracted 1 region(s) using doxygen markers" in output


def test_log_file_records_logger_names(tmp_path: Path) -> None:
    log_file = tmp_path / "geoffrey.log"
    configure_logging(verbosity=1, log_file=log_file, stream=io.StringIO())

    get_logger("rewriter").debug("Resolved 2 tag(s)")
    for handler in logging.getLogger("geoffrey").handlers:
        handler.flush()

    assert "[Debug] geoffrey.rewriter: Resolved 2 tag(s)" in log_file.read_text(encoding="utf-8")


def test_reconfiguring_replaces_handlers() -> None:
    first, second = io.StringIO(), io.StringIO()
    configure_logging(stream=first)
    configure_logging(stream=second)

    get_logger().info("once")

    assert first.getvalue() == ""
    assert "once" in second.getvalue()
    assert len(logging.getLogger("geoffrey").handlers) == 1
