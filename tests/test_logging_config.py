"""
test_logging_config.py - Tests for jsonbody/logging_config.py

Verifies Loguru setup and stdlib logging interception. Uses loguru's sink
capture for assertions.

Called by: pytest
Depends on: jsonbody/logging_config.py
"""

import json
import logging

import pytest
from loguru import logger

from jsonbody.config import Settings
from jsonbody.logging_config import setup_logging


@pytest.fixture(autouse=True)
def _clean_loguru():
    """Remove all handlers before/after each test for isolation."""
    logger.remove()
    yield
    logger.remove()
    logging.basicConfig(handlers=[], force=True)


def test_setup_logging_adds_handler():
    """setup_logging installs at least one loguru sink."""
    assert len(logger._core.handlers) == 0
    setup_logging(Settings(_env_file=None))
    assert len(logger._core.handlers) > 0


def test_stdlib_logging_intercepted():
    """Records logged through the stdlib logging module reach loguru."""
    setup_logging(Settings(_env_file=None))

    messages = []
    logger.add(lambda m: messages.append(str(m)), format="{message}")

    logging.getLogger("test.intercept").warning("intercepted message")

    assert any("intercepted message" in m for m in messages)


def test_log_level_from_settings(capsys):
    """Messages below the configured level are filtered out."""
    setup_logging(Settings(_env_file=None, log_level="warning"))

    logger.info("should be filtered")
    logger.warning("should appear")

    out = capsys.readouterr().out
    assert "should appear" in out
    assert "should be filtered" not in out


def test_json_output(capsys):
    """log_json switches the sink to serialized JSON lines."""
    setup_logging(Settings(_env_file=None, log_json=True))
    logger.info("structured line")

    lines = [l for l in capsys.readouterr().out.splitlines() if "structured line" in l]
    assert lines
    record = json.loads(lines[0])
    assert record["record"]["message"] == "structured line"
