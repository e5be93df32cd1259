"""
Standards DB Logging Configuration.

Provides consistent logging setup across all modules with:
- Structured log format with timestamps
- File and console handlers
- Log level configuration via environment variable
- Context-aware logging (table name, lookup query)

Usage:
    from standards_db.utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Loaded corpus", extra={"table": "motors"})
"""

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


DEFAULT_LOG_LEVEL = os.environ.get("STDDB_LOG_LEVEL", "INFO").upper()

LOG_DIR = Path(os.environ.get("STDDB_LOG_DIR", "logs"))

# Record attributes appended to messages when passed via `extra=`
CONTEXT_KEYS = ["table", "query", "path"]


class StandardsFormatter(logging.Formatter):
    """Console formatter with color support."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors and sys.stderr.isatty()
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        extras = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if hasattr(record, key)
        ]
        if extras:
            formatted = f"{formatted} [{', '.join(extras)}]"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            return f"{color}{formatted}{self.RESET}"
        return formatted


class FileFormatter(logging.Formatter):
    """Dict-style formatter for file output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return str(log_data)


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_to_file: bool = False,
    log_file: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure logging for the entire application.

    Console output goes to stderr so that command output on stdout
    (records, violation lists) stays machine-readable.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to also log to a file
        log_file: Custom log file path (default: logs/standards_db_YYYYMMDD.log)
        log_dir: Directory for the default log file
    """
    level = level.upper()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(StandardsFormatter(use_colors=True))
    console_handler.setLevel(getattr(logging, level, logging.INFO))
    root_logger.addHandler(console_handler)

    if log_to_file:
        directory = Path(log_dir) if log_dir is not None else LOG_DIR
        directory.mkdir(parents=True, exist_ok=True)
        if log_file is None:
            log_file = directory / f"standards_db_{datetime.now().strftime('%Y%m%d')}.log"
        else:
            log_file = Path(log_file)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(FileFormatter())
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


_initialized = False


def ensure_logging() -> None:
    """Ensure logging is set up (call once at application start)."""
    global _initialized
    if not _initialized:
        setup_logging()
        _initialized = True
