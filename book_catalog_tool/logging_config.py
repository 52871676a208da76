"""Centralized logging configuration with multi-level verbosity support.

This module provides setup_logging() for configuring diagnostic logging based
on the verbosity count from CLI arguments (-v, -vv, -vvv). Diagnostic logging
is separate from the catalog error log (see storage.error_log).

Supports both stderr and file logging via environment variables:
    LOG_FILE: Path to log file (optional, disables stderr when set)
    LOG_FORMAT: Log format string (optional)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(threadName)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_LOG_FORMAT = "[%(levelname)s] %(message)s"


def setup_logging(
    verbose_count: int = 0,
    log_file: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose_count: Number of -v flags (0-3+)
            0: WARNING level (quiet mode)
            1: INFO level
            2: DEBUG level
            3+: DEBUG, including OpenTelemetry SDK internals
        log_file: Path to log file. If not provided, checks LOG_FILE env var.
            When set, logs go to file instead of stderr.
        log_format: Custom log format. If not provided, checks LOG_FORMAT env var.

    Example:
        >>> setup_logging(0)  # WARNING only, logs to stderr
        >>> setup_logging(2, log_file="/tmp/book-catalog-tool.log")  # DEBUG to file
    """
    if verbose_count <= 0:
        level = logging.WARNING
    elif verbose_count == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    file_path = log_file or os.environ.get("LOG_FILE")
    fmt = log_format or os.environ.get("LOG_FORMAT")

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    if file_path:
        _setup_file_handler(root_logger, file_path, level, fmt)
    else:
        _setup_console_handler(root_logger, level, fmt)

    # OpenTelemetry SDK logs only at trace level (-vvv)
    otel_level = logging.DEBUG if verbose_count >= 3 else logging.WARNING
    logging.getLogger("opentelemetry").setLevel(otel_level)


def _setup_console_handler(
    logger: logging.Logger,
    level: int,
    fmt: str | None = None,
) -> None:
    """Set up console handler for stderr output."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt or CONSOLE_LOG_FORMAT))
    logger.addHandler(handler)


def _setup_file_handler(
    logger: logging.Logger,
    file_path: str,
    level: int,
    fmt: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
) -> None:
    """Set up rotating file handler.

    Args:
        logger: Logger to configure.
        file_path: Path to log file.
        level: Logging level.
        fmt: Optional custom format string.
        max_bytes: Maximum file size before rotation (default 10MB).
        backup_count: Number of backup files to keep (default 5).
    """
    log_path = Path(file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        file_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_LOG_FORMAT, datefmt=DEFAULT_DATE_FORMAT))
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
