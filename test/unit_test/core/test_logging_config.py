"""Unit tests for the logging configuration module."""

import logging

import pytest

from intent_router.core import logging_config
from intent_router.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    LOG_FILE_NAME,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler() -> logging.Handler:
    root = logging.getLogger()
    return next(h for h in root.handlers if type(h) is logging.StreamHandler)


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    root = logging.getLogger()
    saved = root.handlers[:]
    saved_level = root.level
    yield
    root.handlers[:] = saved
    root.setLevel(saved_level)


@pytest.mark.parametrize(
    "log_level,expected_level",
    [
        ("DEBUG", logging.DEBUG),
        ("INFO", logging.INFO),
        ("WARNING", logging.WARNING),
        ("error", logging.ERROR),
    ],
)
def test_console_handler_level(log_level: str, expected_level: int) -> None:
    setup_logging(log_level=log_level, enable_file=False)
    assert _console_handler().level == expected_level


@pytest.mark.parametrize(
    "log_format,expected_format",
    [("simple", SIMPLE_FORMAT), ("detailed", DETAILED_FORMAT), ("json", JSON_FORMAT), ("unknown", DETAILED_FORMAT)],
)
def test_formats(log_format: str, expected_format: str) -> None:
    setup_logging(log_format=log_format, enable_file=False)
    assert _console_handler().formatter._fmt == expected_format


def test_repeated_setup_does_not_duplicate_handlers() -> None:
    setup_logging(enable_file=False)
    setup_logging(enable_file=False)
    assert len(logging.getLogger().handlers) == 1


def test_file_logging_writes_under_configured_dir(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        logging_config,
        "_get_logging_config",
        lambda: {"log_level": "INFO", "log_format": "simple", "log_file_dir": str(tmp_path / "logs"), "enable_file_logging": True},
    )

    setup_logging()

    file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.DEBUG
    assert (tmp_path / "logs" / LOG_FILE_NAME).exists()
    file_handlers[0].close()


def test_module_levels_applied() -> None:
    setup_logging(enable_file=False)
    for name, level in MODULE_LOG_LEVELS.items():
        assert logging.getLogger(name).level == logging.getLevelName(level)


def test_get_logger_returns_named_logger() -> None:
    assert get_logger("intent_router.agent_core.runtime").name == "intent_router.agent_core.runtime"
