"""Tests for the application logger utility."""

from __future__ import annotations

import logging
import logging.handlers
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the logger singleton and logging state between tests."""
    import pomoplan.utils.logger as logger_mod

    original = logger_mod._logger
    logger_mod._logger = None

    existing = logging.getLogger("pomoplan")
    existing.handlers.clear()

    yield

    logger_mod._logger = None
    for handler in logging.getLogger("pomoplan").handlers:
        handler.close()
    logging.getLogger("pomoplan").handlers.clear()
    logger_mod._logger = original


def test_get_logger_creates_log_file(tmp_path):
    """Logger creates the log file inside user_log_dir."""
    with patch("pomoplan.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from pomoplan.utils.logger import get_logger

        logger = get_logger()

    log_file = tmp_path / "pomoplan.log"
    assert log_file.exists(), "Log file should be created on first use"
    assert isinstance(logger, logging.Logger)


def test_get_logger_returns_singleton(tmp_path):
    """Repeated calls return the same logger instance."""
    with patch("pomoplan.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from pomoplan.utils.logger import get_logger

        l1 = get_logger()
        l2 = get_logger()

    assert l1 is l2


def test_logger_uses_rotating_handler(tmp_path):
    with patch("pomoplan.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from pomoplan.utils.logger import get_logger

        logger = get_logger()

    [handler] = logger.handlers
    assert isinstance(handler, logging.handlers.RotatingFileHandler)
    assert handler.maxBytes == 2 * 1024 * 1024
    assert handler.backupCount == 3
    assert logger.propagate is False


def test_module_loggers_reach_the_log_file(tmp_path):
    """Library modules log via getLogger(__name__) and share the app handler."""
    with patch("pomoplan.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from pomoplan.utils.logger import get_logger

        get_logger()

    logging.getLogger("pomoplan.services.task_service").info("hello from the service")
    for handler in logging.getLogger("pomoplan").handlers:
        handler.flush()

    content = (tmp_path / "pomoplan.log").read_text(encoding="utf-8")
    assert "hello from the service" in content
    assert "[pomoplan.services.task_service]" in content


def test_creates_missing_log_dir(tmp_path):
    target = tmp_path / "nested" / "logs"
    with patch("pomoplan.utils.logger.user_log_dir", return_value=str(target)):
        from pomoplan.utils.logger import get_logger, log_file_path

        get_logger()
        assert log_file_path() == target / "pomoplan.log"

    assert target.is_dir()
