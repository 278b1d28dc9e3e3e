"""Tests for structured logging utilities."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from winprocmon.utils.logging import ContextLogger, configure_default_logger, get_logger


def test_context_logger_adds_and_restores_context(caplog):
    caplog.set_level(logging.INFO)
    logger = get_logger("winprocmon.tests")
    logger.add_context(service="collector")

    with ContextLogger(logger, cycle=2, service="override"):
        logger.info("message", process_count=12)

    record = json.loads(caplog.records[-1].getMessage())
    assert record["cycle"] == 2
    assert record["service"] == "override"
    assert record["process_count"] == 12

    assert logger.context["service"] == "collector"
    assert "cycle" not in logger.context


def test_disabled_level_is_not_emitted(caplog):
    caplog.set_level(logging.WARNING)
    logger = get_logger("winprocmon.tests.quiet")

    logger.debug("hidden")

    assert caplog.records == []


def test_configure_default_logger_creates_file(tmp_path):
    log_file = Path(tmp_path) / "logs" / "winprocmon.log"
    logger = configure_default_logger(level="DEBUG", log_file=str(log_file))
    get_logger("winprocmon.services.test").info("hello world", cycle=1)

    for handler in logger.logger.handlers:
        handler.flush()

    assert log_file.exists()
    line = log_file.read_text().strip().splitlines()[-1]
    assert json.loads(line)["message"] == "hello world"


def test_configure_default_logger_is_idempotent(tmp_path):
    log_file = str(Path(tmp_path) / "winprocmon.log")
    configure_default_logger(log_file=log_file)
    logger = configure_default_logger(log_file=log_file)

    assert len(logger.logger.handlers) == 2


def test_warn_level_alias():
    logger = get_logger("winprocmon.tests.warn")
    logger.set_level("WARN")
    assert logger.logger.level == logging.WARNING
    logger.logger.setLevel(logging.NOTSET)
