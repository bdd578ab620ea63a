"""
Logging setup shared by all modules and scripts.
Scripts call setup_logging() once; modules use get_logger(__name__).
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config import (
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_FILE,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_BYTES,
    LOG_BACKUP_COUNT,
)


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_dir: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger: console handler, plus a rotating file handler when log_to_file.
    Safe to call more than once (existing handlers are replaced).
    """
    root = logging.getLogger()
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_to_file:
        directory = Path(log_dir or DEFAULT_LOG_DIR)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            directory / (log_file or DEFAULT_LOG_FILE),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logging.getLogger("urllib3").setLevel(logging.ERROR)  # Suppress HTTP warnings
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a module logger (handlers come from setup_logging on the root)."""
    return logging.getLogger(name)
