"""
Typed accessors over generic records.

Tables have no fixed schema, so instead of one class per table these
helpers read the handful of fields the lookup and validation code cares
about (name, capacity band, date range, construction layers) out of the
same generic mapping.
"""

import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)


# Wildcard value: a record field set to this matches every query value
WILDCARD = "Any"

NAME_FIELD = "name"
MIN_CAPACITY_FIELD = "minimum_capacity"
MAX_CAPACITY_FIELD = "maximum_capacity"
START_DATE_FIELD = "start_date"
END_DATE_FIELD = "end_date"
LAYERS_FIELD = "materials"


def record_name(record: Mapping) -> Optional[Any]:
    """The record's `name` value, or None if absent."""
    return record.get(NAME_FIELD)


def capacity_band(record: Mapping) -> Optional[Tuple[float, float]]:
    """
    (minimum_capacity, maximum_capacity) as floats.

    Returns None if either bound is missing, null or not numeric.
    """
    low = record.get(MIN_CAPACITY_FIELD)
    high = record.get(MAX_CAPACITY_FIELD)
    if low is None or high is None:
        return None
    try:
        return float(low), float(high)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric capacity band {low!r}..{high!r}")
        return None


@lru_cache(maxsize=4096)
def parse_date(value: str) -> date:
    """
    Parse an ISO-8601 date or datetime string to a calendar date.

    Accepts "2014-11-26", "2014-11-26T00:00:00+00:00" and a trailing "Z".

    Raises:
        ValueError: If the string is not ISO-8601
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def as_date(value: Any) -> date:
    """Normalize a query or record date (date, datetime or ISO string) to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value)
    raise TypeError(f"Expected a date, datetime or ISO string, got {type(value).__name__}")


def date_range(record: Mapping) -> Optional[Tuple[date, date]]:
    """
    (start_date, end_date) as calendar dates.

    Returns None if either field is missing, null or unparseable.
    """
    start = record.get(START_DATE_FIELD)
    end = record.get(END_DATE_FIELD)
    if start is None or end is None:
        return None
    try:
        return as_date(start), as_date(end)
    except (TypeError, ValueError):
        logger.debug(f"Unparseable date range {start!r}..{end!r}")
        return None


def construction_layers(construction: Mapping) -> Tuple[Any, ...]:
    """Ordered material layers of a construction record (outside to inside)."""
    layers = construction.get(LAYERS_FIELD)
    if layers is None:
        return ()
    if isinstance(layers, (list, tuple)):
        return tuple(layers)
    return (layers,)


def thaw(value: Any) -> Any:
    """Convert frozen record structures back to plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


def canonical(value: Any) -> str:
    """
    Order-independent text form of a record, for content comparison.

    1 and 1.0 stay distinct, as do "1" and 1.
    """
    return json.dumps(thaw(value), sort_keys=True, separators=(",", ":"), default=str)
