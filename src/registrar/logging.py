"""Centralized logging configuration for Registrar.

All components log through children of the ``registrar`` logger, so a single
call to :func:`setup_logging` routes store, enrollment and engine messages to
one rotating log file.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from registrar.config import RegistrarConfig

# Default configuration
DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "registrar.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

# Log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Set up logging with rotating file handler.

    Args:
        log_dir: Directory for log files. Defaults to 'logs' in current directory.
                 Can be overridden with REGISTRAR_LOG_DIR environment variable.
        log_file: Log file name. Defaults to 'registrar.log'.
        max_bytes: Maximum size per log file before rotation. Defaults to 10MB.
        backup_count: Number of backup files to keep. Defaults to 5.
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO.
               Can be overridden with REGISTRAR_LOG_LEVEL environment variable.
        console: Whether to also log to console. Defaults to True.

    Returns:
        The root registrar logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("REGISTRAR_LOG_DIR", DEFAULT_LOG_DIR)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    if level is None:
        level = os.environ.get("REGISTRAR_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("registrar")
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = log_dir / log_file
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.info("Registrar logging initialized (level=%s, file=%s)", level, log_path)

    return logger


def setup_logging_from_config(config: RegistrarConfig, console: bool = True) -> logging.Logger:
    """Set up logging from the log_dir and log_level of a loaded configuration.

    Unset values fall back to the environment and then to the defaults, as
    in :func:`setup_logging`.
    """
    return setup_logging(log_dir=config.log_dir, level=config.log_level, console=console)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a component.

    Args:
        name: Component name (e.g., 'records', 'enrollment').
              Will be prefixed with 'registrar.'.

    Returns:
        Logger instance for the component.
    """
    if not name.startswith("registrar."):
        name = f"registrar.{name}"
    return logging.getLogger(name)


def mask_email(email: str) -> str:
    """Hide the local part of an email address for log output.

    Args:
        email: Address to mask.

    Returns:
        The address with all but the first character of the local part masked.
    """
    local, sep, domain = email.partition("@")
    if not sep or not local:
        return email
    return f"{local[0]}***@{domain}"
