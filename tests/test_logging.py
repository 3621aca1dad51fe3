"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from portfel.config import TestConfig
from portfel.logging_config import ROOT_LOGGER_NAME, JSONFormatter, get_logger, setup_logging


@pytest.fixture
def log_config(tmp_path, monkeypatch):
    monkeypatch.setenv("PORTFEL_DATA_DIR", str(tmp_path))
    config = TestConfig()
    yield config
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()


def _record(**kwargs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="portfel.scheduler",
        level=kwargs.pop("level", logging.INFO),
        pathname="scheduler.py",
        lineno=42,
        msg=kwargs.pop("msg", "Scheduled daily_report notification"),
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )
    record.module = "scheduler"
    record.funcName = "_schedule_report"
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    """JSONFormatter emits one object with the standard fields."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "portfel.scheduler"
    assert log_data["message"] == "Scheduled daily_report notification"
    assert log_data["module"] == "scheduler"
    assert log_data["function"] == "_schedule_report"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_includes_extra_fields():
    log_data = json.loads(JSONFormatter().format(_record(alarm_id="alarm-1", next_trigger="2024-06-15T18:00:00")))

    assert log_data["extra"] == {"alarm_id": "alarm-1", "next_trigger": "2024-06-15T18:00:00"}


def test_json_formatter_with_exception():
    """JSONFormatter serializes exception details."""
    try:
        raise ValueError("storage offline")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(_record(level=logging.ERROR, msg="Failed", exc_info=exc_info))
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "storage offline" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_setup_logging(log_config, tmp_path):
    """Logging setup creates a rotating JSON log file under the data directory."""
    logger = setup_logging(log_config)

    assert logger.name == "portfel"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2

    log_file = tmp_path / "logs" / "portfel.log"
    assert log_file.exists()

    get_logger("scheduler").warning("Notification permissions not granted")
    for handler in logger.handlers:
        handler.flush()

    entries = [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[0]["extra"]["notifications"] == "none"
    assert entries[-1]["logger"] == "portfel.scheduler"
    assert entries[-1]["level"] == "WARNING"

    file_handler = next(
        h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
    )
    assert file_handler.maxBytes == 5 * 1024 * 1024
    assert file_handler.backupCount == 3


def test_setup_logging_is_repeatable(log_config):
    setup_logging(log_config)
    logger = setup_logging(log_config)

    assert len(logger.handlers) == 2


def test_get_logger():
    """get_logger returns loggers namespaced under the package."""
    logger1 = get_logger("scheduler")
    logger2 = get_logger("report_generator")

    assert logger1.name == "portfel.scheduler"
    assert logger2.name == "portfel.report_generator"
    assert logger1 != logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(log_config, dev_mode):
    """Console logging level adjusts based on dev mode."""
    log_config.DEV_MODE = dev_mode

    logger = setup_logging(log_config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    )
    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level
