# core/logging_setup.py
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.constants import APP_DIR_NAME, LOG_BACKUP_COUNT, LOG_FILE_NAME, LOG_MAX_BYTES


def setup_logging(debug: bool = False, log_dir: Optional[Path] = None) -> Path:
    """
    Configure application-wide logging.

    - Logs to ~/.exilian/exilian.log (rotating, max ~1 MB, 3 backups)
    - Also logs to console (stderr) with the bare message, so loader notices
      read like ordinary CLI output

    Returns:
        Path of the log file
    """
    if log_dir is None:
        log_dir = Path.home() / APP_DIR_NAME
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    level = logging.DEBUG if debug else logging.INFO

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers (useful if re-running in dev/REPL)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # File handler with rotation
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    )
    file_handler.setFormatter(file_fmt)
    file_handler.setLevel(level)
    root_logger.addHandler(file_handler)

    # Console handler
    console_handler = logging.StreamHandler()
    if debug:
        console_fmt = logging.Formatter("[%(levelname)s] %(name)s - %(message)s")
    else:
        console_fmt = logging.Formatter("%(message)s")
    console_handler.setFormatter(console_fmt)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    # requests/urllib3 chatter only in debug runs
    logging.getLogger("urllib3").setLevel(logging.DEBUG if debug else logging.WARNING)

    root_logger.debug("Logging initialized")
    root_logger.debug(f"Log file: {log_file}")
    return log_file
