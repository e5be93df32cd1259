"""Record search over a loaded corpus."""

from .engine import (
    StandardsLookup,
    filter_by_capacity,
    filter_by_date,
    find_object,
    find_objects,
    matches_criteria,
    normalize_capacity,
)
from .index import PredicateIndex, build_index

__all__ = [
    "StandardsLookup",
    "find_object",
    "find_objects",
    "matches_criteria",
    "filter_by_capacity",
    "filter_by_date",
    "normalize_capacity",
    "PredicateIndex",
    "build_index",
]
