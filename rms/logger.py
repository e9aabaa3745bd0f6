"""Application logging."""

from __future__ import annotations

import logging
import os
import sys

from rms.config import LOG_PATH

LOGGER_NAME = "rms"
_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(path: str = LOG_PATH, level: int = logging.INFO, console: bool = False) -> None:
    """Attach the log file handler once; a TUI owns the terminal so console output is opt-in."""
    if logger.handlers:
        return

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(_FORMAT, "%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(_FORMAT, "%H:%M:%S"))
        logger.addHandler(console_handler)

    logger.setLevel(level)
    logger.info("=" * 60)
    logger.info("RMS PRO - STARTED (python %s, %s)", sys.version.split()[0], sys.platform)
    logger.info("Log file: %s", path)


def log_event(msg: str) -> None:
    logger.info(msg)


def log_warning(msg: str) -> None:
    logger.warning(msg)


def log_debug(msg: str) -> None:
    logger.debug(msg)


def log_error(msg: str, exc: BaseException | None = None) -> None:
    """Log an error, with traceback when an exception is given."""
    if exc is not None:
        logger.error("%s: %s", msg, exc, exc_info=exc)
    else:
        logger.error(msg)
