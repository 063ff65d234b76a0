"""Logging helpers for the promptlib backend."""

import logging
import sys

from .config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging() -> None:
    """Send ``promptlib`` logs to stdout; DEBUG when settings.debug is on."""
    logger = logging.getLogger("promptlib")
    logger.setLevel(logging.DEBUG if get_settings().debug else logging.INFO)
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``promptlib.backend`` namespace."""
    return logging.getLogger(f"promptlib.backend.{name}")


def log_import_operation(user_id: str, kind: str, report: dict) -> None:
    """One INFO line per import request with its counters."""
    get_logger("imports").info(
        f"import kind={kind} user={user_id} total={report.get('total')} "
        f"inserted={report.get('inserted')} updated={report.get('updated')} "
        f"errors={report.get('errors')} groups_created={len(report.get('groupsCreated') or [])}"
    )
