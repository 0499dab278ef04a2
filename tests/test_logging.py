"""
Tests for logging setup and the per-run logger.
"""

import logging
import logging.handlers

import pytest

from wingetctl.core.observability.logging_config import (
    ENGINE_LOGGER_NAME,
    RunLogger,
    new_run_logger,
    setup_logging,
)


@pytest.fixture
def restore_root():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestRunLogger:
    def test_prefixes_run_id(self, caplog):
        log = new_run_logger("abcd1234")
        with caplog.at_level(logging.INFO, logger=ENGINE_LOGGER_NAME):
            log.info("probing %s", "winget.exe")
        assert caplog.records[-1].getMessage() == "[abcd1234] probing winget.exe"
        assert caplog.records[-1].run_id == "abcd1234"

    def test_child_keeps_run_id(self, caplog):
        log = new_run_logger("abcd1234").child("cascade")
        assert isinstance(log, RunLogger)
        assert log.run_id == "abcd1234"
        with caplog.at_level(logging.INFO, logger=ENGINE_LOGGER_NAME):
            log.warning("strategy failed")
        record = caplog.records[-1]
        assert record.name == f"{ENGINE_LOGGER_NAME}.cascade"
        assert record.getMessage() == "[abcd1234] strategy failed"

    def test_generated_ids_are_distinct(self):
        first, second = new_run_logger(), new_run_logger()
        assert len(first.run_id) == 8
        assert first.run_id != second.run_id


class TestSetupLogging:
    def test_console_level(self, restore_root):
        setup_logging(level="INFO")
        assert restore_root.level == logging.INFO
        assert len(restore_root.handlers) == 1
        assert restore_root.handlers[0].level == logging.INFO

    def test_unknown_level_falls_back_to_warning(self, restore_root):
        setup_logging(level="LOUD")
        assert restore_root.level == logging.WARNING

    def test_file_handler(self, restore_root, tmp_path):
        log_file = tmp_path / "wingetctl.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")

        assert restore_root.level == logging.DEBUG
        new_run_logger("feedbeef").debug("listing Mozilla.Firefox")
        for handler in restore_root.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "[feedbeef] listing Mozilla.Firefox" in text
        assert "DEBUG" in text

    def test_file_rotates(self, restore_root, tmp_path):
        setup_logging(log_file=str(tmp_path / "wingetctl.log"))
        file_handlers = [h for h in restore_root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].backupCount > 0
