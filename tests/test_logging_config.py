"""Tests for promptlib.logging_config module."""

import logging

import pytest

from promptlib.logging_config import (
    log_copy,
    log_export,
    log_import,
    log_library_event,
    setup_promptlib_logging,
)
from promptlib.types import ImportProgress


@pytest.fixture(autouse=True)
def clean_promptlib_logger():
    """Remove all handlers from the promptlib logger before/after each test."""
    logger = logging.getLogger("promptlib")
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    yield
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def log_dir(isolated_home):
    return isolated_home / "logs"


def _event_lines(log_dir):
    files = list(log_dir.glob("library-events-*.log"))
    assert len(files) == 1
    return files[0].read_text(encoding="utf-8").splitlines()


class TestSetupPromptlibLogging:
    def test_returns_package_logger(self, log_dir):
        logger = setup_promptlib_logging("user-1")
        assert logger.name == "promptlib"
        assert logger.level == logging.INFO

    def test_creates_dated_log_file(self, log_dir):
        setup_promptlib_logging("user-1")
        logging.getLogger("promptlib.test").info("hello")

        files = list(log_dir.glob("local-*.log"))
        assert len(files) == 1
        assert "hello" in files[0].read_text(encoding="utf-8")

    def test_handlers_added_once(self, log_dir):
        setup_promptlib_logging("user-1")
        logger = setup_promptlib_logging("user-1")
        assert len([h for h in logger.handlers if isinstance(h, logging.FileHandler)]) == 1

    def test_debug_adds_console(self, log_dir):
        logger = setup_promptlib_logging("user-1", level="debug")
        assert logger.level == logging.DEBUG
        consoles = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        assert len(consoles) == 1

    def test_unknown_level_falls_back_to_info(self, log_dir):
        assert setup_promptlib_logging("user-1", level="LOUD").level == logging.INFO


class TestLibraryEvents:
    def test_line_format(self, log_dir):
        log_library_event("custom", "a=1", user_id="user-1")

        (line,) = _event_lines(log_dir)
        timestamp, event, user, details = line.split(" | ")
        assert timestamp.startswith("20")
        assert event == "custom"
        assert user == "user=user-1"
        assert details == "a=1"

    def test_default_user(self, log_dir):
        log_library_event("custom", "x")
        assert "| user=default |" in _event_lines(log_dir)[0]

    def test_appends(self, log_dir):
        log_export("user-1", "csv", 3)
        log_copy("user-1", "0123456789abcdef")
        lines = _event_lines(log_dir)
        assert lines[0].endswith("| export | user=user-1 | format=csv count=3")
        assert lines[1].endswith("| copy | user=user-1 | id=01234567...")

    def test_import_summary(self, log_dir):
        progress = ImportProgress(total=3, inserted=2, updated=1, groups_created=["A", "B"])
        log_import("user-1", "csv", progress)
        assert _event_lines(log_dir)[0].endswith(
            "source=csv total=3 inserted=2 updated=1 errors=0 groups_created=A,B"
        )

    def test_import_without_new_groups(self, log_dir):
        log_import("user-1", "json", ImportProgress())
        assert _event_lines(log_dir)[0].endswith("groups_created=-")
