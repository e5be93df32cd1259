"""Utility modules."""

from .logging_config import (
    get_logger,
    setup_logging,
    ensure_logging,
    StandardsFormatter,
    FileFormatter,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "ensure_logging",
    "StandardsFormatter",
    "FileFormatter",
]
