"""Corpus integrity checks."""

from .integrity import (
    CHECKS,
    check_duplicate_rows,
    check_name_characters,
    check_reverse_equal,
    check_reversed_constructions,
    check_schedule_references,
    check_unique_names,
    validate,
)

__all__ = [
    "CHECKS",
    "validate",
    "check_unique_names",
    "check_duplicate_rows",
    "check_schedule_references",
    "check_reverse_equal",
    "check_reversed_constructions",
    "check_name_characters",
]
