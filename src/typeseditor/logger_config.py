"""Logging setup: one rotating log file under the user config directory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from typeseditor.config import USER_CONFIG_DIR

LOG_DIR = USER_CONFIG_DIR / "logs"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_dir: Path = LOG_DIR, level: int = logging.DEBUG) -> Path:
    """Send application logs to a rotating file.

    The terminal belongs to the TUI, so there is no console handler.
    Returns the log file path.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "typeseditor.log"

    logger = logging.getLogger("typeseditor")
    logger.setLevel(level)
    logger.propagate = False

    # Drop old handlers to avoid duplicate lines on re-init
    if logger.hasHandlers():
        logger.handlers.clear()

    # 5MB per file, keep 5 backups
    file_handler = RotatingFileHandler(
        log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    logger.info("===== Logging setup complete =====")
    return log_file
