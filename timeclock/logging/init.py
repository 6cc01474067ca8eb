from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Labeled console logging for the timeclock tool.

Each line is ``<LABEL> <message>`` with LABEL one of INFO|WARN|ERROR|SUMMARY
(DEBUG under --debug). Module loggers (``logging.getLogger(__name__)``) are
children of ``timeclock`` and reach the single handler installed here.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "set_debug",
    "reset_logging",
]

LOGGER_NAME = "timeclock"

# INFO(20) < SUMMARY < WARNING(30)
SUMMARY_LEVEL = 25

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``LABEL message``; WARNING is shortened to WARN."""

    LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        SUMMARY_LEVEL: "SUMMARY",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def setup_logging(stream: TextIO | None = None) -> logging.Logger:
    """Install the labeled handler on the ``timeclock`` logger once.

    Later calls return the same logger until reset_logging() is called.
    ``stream`` defaults to the current sys.stdout.
    """
    global _configured

    if _configured is not None:
        return _configured

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(logging.INFO)
    for old in list(root.handlers):
        root.removeHandler(old)

    console = logging.StreamHandler(stream if stream is not None else sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(LabeledFormatter())
    root.addHandler(console)
    # 상위 root 로거로 보내지 않음 (중복 출력 방지)
    root.propagate = False

    _configured = root
    return root


def get_logger() -> logging.Logger:
    return _configured if _configured is not None else setup_logging()


def log_summary(message: str) -> None:
    """Emit ``message`` at the SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def set_debug(enabled: bool = True) -> None:
    """Switch the logger and its handlers between DEBUG and INFO."""
    logger = get_logger()
    level = logging.DEBUG if enabled else logging.INFO
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)


def reset_logging() -> None:
    """Forget the configured logger so the next setup_logging() rebuilds it (tests)."""
    global _configured
    _configured = None
