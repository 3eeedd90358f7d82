"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from habitgrove.config import TestConfig
from habitgrove.errors import CapacityExceeded
from habitgrove.logging_config import JSONFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_habitgrove_logger():
    yield
    logger = logging.getLogger("habitgrove")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _record(level=logging.INFO, msg="Test message", exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


def test_json_formatter():
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(_record(logging.ERROR, "Error occurred", exc_info)))

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_json_formatter_includes_extra_fields():
    record = _record()
    record.habit_id = "h1"
    log_data = json.loads(JSONFormatter().format(record))
    assert log_data["extra"] == {"habit_id": "h1"}


def test_json_formatter_promotes_owner_and_error_kind():
    try:
        raise CapacityExceeded("Maximum 3 active habits allowed.")
    except CapacityExceeded:
        exc_info = sys.exc_info()

    record = _record(logging.WARNING, "Add refused", exc_info)
    record.owner_id = "tester"
    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["owner_id"] == "tester"
    assert "extra" not in log_data
    assert log_data["exception"]["kind"] == "capacity_exceeded"


def test_setup_logging(tmp_path):
    """Logging setup creates a rotating JSON log file under DATA_DIR/logs."""
    config = TestConfig(tmp_path)
    config.DEV_MODE = True

    logger = setup_logging(config)

    assert logger.name == "habitgrove"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2  # Console + File

    log_file = tmp_path / "logs" / "habitgrove.log"
    assert log_file.exists()

    get_logger("registry").warning("Habit added", extra={"habit_id": "abc"})
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    entries = [json.loads(line) for line in lines]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[-1]["logger"] == "habitgrove.registry"
    assert entries[-1]["extra"]["habit_id"] == "abc"


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path):
    config = TestConfig(tmp_path)
    setup_logging(config)
    logger = setup_logging(config)
    assert len(logger.handlers) == 2


def test_get_logger():
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")

    assert logger1.name == "habitgrove.module1"
    assert logger2.name == "habitgrove.module2"
    assert logger1 != logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(tmp_path, dev_mode):
    """Console logging level adjusts based on dev mode."""
    config = TestConfig(tmp_path)
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = None
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, logging.handlers.RotatingFileHandler
        ):
            console_handler = handler
            break

    assert console_handler is not None
    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level
