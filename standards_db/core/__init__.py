"""Core models, record accessors and configuration."""

from .config import Settings, settings, DEFAULT_STANDARDS_FILES
from .models import (
    Corpus,
    CorpusLoadError,
    RecordStore,
    StandardsError,
    TableNotFound,
)

__all__ = [
    "Settings",
    "settings",
    "DEFAULT_STANDARDS_FILES",
    "Corpus",
    "CorpusLoadError",
    "RecordStore",
    "StandardsError",
    "TableNotFound",
]
