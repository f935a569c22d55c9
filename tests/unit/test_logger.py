"""
Unit tests for structured logging.
"""

import json
import logging

import pytest

from pet_provider.observability.logger import (
    DEFAULT_LOGGER_NAME,
    get_logger,
    log_operation,
    setup_logger,
)


@pytest.fixture
def fresh_logger():
    """Yield a logger name and remove its handlers afterwards"""
    name = "pet-provider-logging-test"
    yield name
    logging.getLogger(name).handlers.clear()


class TestSetupLogger:
    """Tests for setup_logger"""

    def test_json_format(self, fresh_logger, capsys):
        logger = setup_logger(fresh_logger, level="info", format_type="json")
        logger.info("Inserting pet", extra={"uri": "content://x/pets"})

        payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])

        assert payload["message"] == "Inserting pet"
        assert payload["level"] == "INFO"
        assert payload["logger"] == fresh_logger
        assert payload["function"] == "test_json_format"
        assert payload["uri"] == "content://x/pets"
        assert "timestamp" in payload

    def test_text_format(self, fresh_logger, capsys):
        logger = setup_logger(fresh_logger, level="DEBUG", format_type="text")
        logger.debug("Opened store")

        err = capsys.readouterr().err
        assert " - DEBUG - " in err
        assert "Opened store" in err

    def test_level_from_environment(self, fresh_logger, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        assert setup_logger(fresh_logger).level == logging.WARNING

    def test_repeated_setup_keeps_one_handler(self, fresh_logger):
        setup_logger(fresh_logger)
        logger = setup_logger(fresh_logger)
        assert len(logger.handlers) == 1


class TestGetLogger:
    """Tests for get_logger"""

    def test_module_loggers_are_children_of_package_logger(self):
        logger = get_logger("pet_provider.store.sqlite_store")
        assert logger.name == f"{DEFAULT_LOGGER_NAME}.pet_provider.store.sqlite_store"
        assert logging.getLogger(DEFAULT_LOGGER_NAME).handlers

    def test_default_name(self):
        assert get_logger() is logging.getLogger(DEFAULT_LOGGER_NAME)


class TestLogOperation:
    """Tests for log_operation"""

    def test_success_logged_at_debug(self, caplog):
        logger = get_logger("tests.log_operation")
        with caplog.at_level(logging.DEBUG, logger=DEFAULT_LOGGER_NAME):
            with log_operation("Updating pets", logger=logger, uri="u"):
                pass

        messages = [r.getMessage() for r in caplog.records]
        assert messages == ["Starting: Updating pets", "Completed: Updating pets"]
        assert caplog.records[-1].status == "success"

    def test_failure_logged_and_reraised(self, caplog):
        logger = get_logger("tests.log_operation")
        with caplog.at_level(logging.DEBUG, logger=DEFAULT_LOGGER_NAME):
            with pytest.raises(RuntimeError):
                with log_operation("Deleting pets", logger=logger):
                    raise RuntimeError("disk gone")

        failure = caplog.records[-1]
        assert failure.levelno == logging.WARNING
        assert failure.error_type == "RuntimeError"
        assert failure.error_message == "disk gone"
