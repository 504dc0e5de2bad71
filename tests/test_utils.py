"""Tests for logging setup."""

import json
import logging

from rich.logging import RichHandler

from shellrun.utils import LOGGER_NAME, StructuredFormatter, setup_logging


def _record(msg="hello", **extra):
    record = logging.LogRecord(LOGGER_NAME, logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for JSON log lines."""

    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == LOGGER_NAME
        assert data["message"] == "hello"
        assert "timestamp" in data

    def test_run_extras(self):
        record = _record(phase="run_commands", url="s3://b/k", command="ls")

        data = json.loads(StructuredFormatter().format(record))

        assert data["phase"] == "run_commands"
        assert data["url"] == "s3://b/k"
        assert data["command"] == "ls"

    def test_no_extras(self):
        data = json.loads(StructuredFormatter().format(_record()))

        assert "phase" not in data
        assert "exception" not in data


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_pretty_console(self):
        logger = setup_logging(log_level="debug")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_structured_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"

        logger = setup_logging(log_file=log_file, log_format="structured", console_output=False)
        logging.getLogger(f"{LOGGER_NAME}.runner").info("Running", extra={"command": "true"})

        [line] = log_file.read_text().splitlines()
        data = json.loads(line)
        assert data["message"] == "Running"
        assert data["command"] == "true"
        assert len(logger.handlers) == 1

    def test_plain_file(self, tmp_path):
        log_file = tmp_path / "run.log"

        setup_logging(log_file=log_file, console_output=False)
        logging.getLogger(LOGGER_NAME).warning("careful")

        assert " - WARNING - careful" in log_file.read_text()

    def test_replaces_handlers(self):
        setup_logging()
        logger = setup_logging(log_format="structured")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
