"""Logging setup for promptlib.

Two log streams live under ``<home>/logs``:

- ``local-YYYY-MM-DD.log``: the ``promptlib`` logger hierarchy, attached by
  :func:`setup_promptlib_logging`.
- ``library-events-YYYY-MM-DD.log``: one line per library event (imports,
  exports, copies), written by :func:`log_library_event` regardless of
  logger configuration.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from promptlib.types import ImportProgress
from promptlib.utils import get_promptlib_home

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _log_dir() -> Path:
    log_dir = get_promptlib_home() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def setup_promptlib_logging(user_id: str = "default", level: str = "INFO") -> logging.Logger:
    """Attach a dated file handler to the ``promptlib`` logger.

    DEBUG also logs to the console. Unknown level names fall back to INFO.
    Safe to call repeatedly; handlers are only added once.
    """
    level_name = (level or "INFO").upper()
    if level_name not in _VALID_LEVELS:
        level_name = "INFO"

    logger = logging.getLogger("promptlib")
    logger.setLevel(getattr(logging, level_name))

    formatter = logging.Formatter(LOG_FORMAT)

    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        log_file = _log_dir() / f"local-{_today()}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    has_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )
    if level_name == "DEBUG" and not has_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    logger.debug(f"Logging configured for user={user_id} level={level_name}")
    return logger


def log_library_event(event_type: str, details: str, user_id: Optional[str] = None) -> None:
    """Append one ``timestamp | event | user=... | details`` line to the event log."""
    event_file = _log_dir() / f"library-events-{_today()}.log"
    timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
    line = f"{timestamp} | {event_type} | user={user_id or 'default'} | {details}\n"
    with open(event_file, "a", encoding="utf-8") as f:
        f.write(line)


def log_import(user_id: str, source: str, progress: ImportProgress) -> None:
    groups = ",".join(progress.groups_created) or "-"
    log_library_event(
        "import",
        f"source={source} total={progress.total} inserted={progress.inserted} "
        f"updated={progress.updated} errors={progress.errors} groups_created={groups}",
        user_id=user_id,
    )


def log_export(user_id: str, fmt: str, count: int) -> None:
    log_library_event("export", f"format={fmt} count={count}", user_id=user_id)


def log_copy(user_id: str, prompt_id: str) -> None:
    log_library_event("copy", f"id={prompt_id[:8]}...", user_id=user_id)
