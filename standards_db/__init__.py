"""
Standards DB - Building standards tables, lookup and integrity checks.

Load the corpus once, then query it:

    from standards_db import load_standards, StandardsLookup

    lookup = StandardsLookup(load_standards())
    boiler = lookup.find("boilers", {"template": "90.1-2013", "fuel_type": "NaturalGas"}, capacity=150000)
"""

from .core.models import Corpus, CorpusLoadError, RecordStore, StandardsError, TableNotFound
from .ingest.corpus_loader import load_corpus, load_standards
from .search.engine import StandardsLookup, find_object, find_objects
from .validation.integrity import validate

__version__ = "0.1.0"

__all__ = [
    "Corpus",
    "RecordStore",
    "StandardsError",
    "TableNotFound",
    "CorpusLoadError",
    "load_corpus",
    "load_standards",
    "StandardsLookup",
    "find_object",
    "find_objects",
    "validate",
]
