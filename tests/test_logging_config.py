"""Tests for logging_config.py."""

from __future__ import annotations

import logging

import pytest

from compartment_flowchart.layout import compute_layout
from compartment_flowchart.logging_config import LOG_FORMAT, PACKAGE_LOGGER, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    yield logger
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_console_handler(self, package_logger):
        logger = setup_logging(logging.DEBUG)
        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_repeated_calls_do_not_duplicate(self, package_logger):
        setup_logging()
        setup_logging()
        assert len(package_logger.handlers) == 1

    def test_file_handler(self, package_logger, tmp_path):
        log_file = tmp_path / "flowchart.log"
        setup_logging(logging.DEBUG, log_file=str(log_file))
        assert len(package_logger.handlers) == 2
        compute_layout(3)
        for handler in package_logger.handlers:
            handler.flush()
        assert "laid out 3 boxes" in log_file.read_text()

    def test_module_loggers_are_children(self, caplog):
        with caplog.at_level(logging.DEBUG, logger=PACKAGE_LOGGER):
            compute_layout(5)
        assert any(r.name == "compartment_flowchart.layout" for r in caplog.records)

    def test_handlers_share_format(self, package_logger, tmp_path):
        setup_logging(log_file=str(tmp_path / "flowchart.log"))
        assert {h.formatter._fmt for h in package_logger.handlers} == {LOG_FORMAT}
