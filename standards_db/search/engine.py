"""
Search Engine - Find standards records matching search criteria.

Search pipeline for one table:
1. Predicates: every criterion key the record has must equal the query
   value, or the record value must be "Any". Keys the record lacks are
   not checked.
2. Capacity (optional): minimum_capacity < capacity <= maximum_capacity.
   Whole-number capacities are raised by 1% first; if nothing matches,
   the capacity is lowered by 1% and the band check runs once more.
3. Date (optional): start_date < date <= end_date.

`find_object` returns the first match in table order and logs a warning
when there is more than one. A miss returns None.

Usage:
    lookup = StandardsLookup(corpus)
    motor = lookup.find(
        "motors",
        {"template": "90.1-2013", "number_of_poles": 4.0, "type": "Enclosed"},
        capacity=2.5,
    )
"""

import logging
import threading
from collections.abc import Mapping
from datetime import date as date_type
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..core.config import settings
from ..core.models import Corpus, RecordStore, TableNotFound, freeze_value, make_key
from ..core.records import WILDCARD, as_date, capacity_band, date_range, thaw
from .index import PredicateIndex, UnindexableError, build_index

logger = logging.getLogger(__name__)

# Whole-number capacities are raised by this fraction before comparing
CAPACITY_ROUND_UP = 0.01
# Factor applied to the capacity for the single retry when no band matches
CAPACITY_RETRY_FACTOR = 0.99

DateLike = Union[date_type, str]


# =============================================================================
# FILTERS
# =============================================================================

def matches_criteria(record: Any, search_criteria: Dict[str, Any]) -> bool:
    """True if the record meets every search criterion it has a field for."""
    if not isinstance(record, Mapping):
        return False
    for key, value in search_criteria.items():
        if key not in record:
            continue
        actual = record[key]
        if actual == value or actual == WILDCARD:
            continue
        return False
    return True


def normalize_capacity(capacity: Union[int, float]) -> float:
    """Raise whole-number capacities by 1% so band edges in the data don't exclude them."""
    if isinstance(capacity, bool) or not isinstance(capacity, (int, float)):
        raise TypeError(f"capacity must be a number, got {type(capacity).__name__}")
    capacity = float(capacity)
    if capacity.is_integer():
        capacity += capacity * CAPACITY_ROUND_UP
    return capacity


def _within_band(records: Sequence[Any], capacity: float) -> List[Any]:
    matching = []
    for record in records:
        band = capacity_band(record)
        if band is None:
            continue
        minimum, maximum = band
        if capacity <= minimum:
            continue
        if capacity > maximum:
            continue
        matching.append(record)
    return matching


def filter_by_capacity(
    records: Sequence[Any],
    capacity: Union[int, float],
) -> Tuple[List[Any], float, bool]:
    """
    Keep records whose capacity band contains the capacity.

    Returns:
        (matching records, capacity actually compared, whether the 1% retry was used)
    """
    capacity = normalize_capacity(capacity)
    matching = _within_band(records, capacity)
    if matching:
        return matching, capacity, False

    capacity *= CAPACITY_RETRY_FACTOR
    return _within_band(records, capacity), capacity, True


def filter_by_date(records: Sequence[Any], date: DateLike) -> List[Any]:
    """Keep records with start_date < date <= end_date."""
    when = as_date(date)
    matching = []
    for record in records:
        bounds = date_range(record)
        if bounds is None:
            continue
        start, end = bounds
        if when <= start:
            continue
        if when > end:
            continue
        matching.append(record)
    return matching


# =============================================================================
# SEARCH
# =============================================================================

def resolve_table(corpus: Mapping, table_name: str) -> RecordStore:
    """
    Get a table's records from a Corpus or from plain parsed JSON.

    Raises:
        TableNotFound: If the table name is absent
    """
    if isinstance(corpus, Corpus):
        return corpus.table(table_name)
    if table_name not in corpus:
        raise TableNotFound(table_name, available=sorted(corpus))
    value = corpus[table_name]
    if isinstance(value, RecordStore):
        return value
    return RecordStore.from_json(table_name, value)


def _criteria_keys(corpus: Mapping, search_criteria: Dict[str, Any]) -> Dict[str, Any]:
    key_mode = getattr(corpus, "key_mode", "string")
    # list and object values are compared in their stored (frozen) form
    return {
        make_key(k, key_mode): freeze_value(v, key_mode)
        for k, v in search_criteria.items()
    }


def _describe(table_name: str, search_criteria: Dict[str, Any], capacity, date) -> str:
    parts = [f"{table_name}: {search_criteria}"]
    if capacity is not None:
        parts.append(f"capacity = {capacity}")
    if date is not None:
        parts.append(f"date = {date}")
    return ", ".join(parts)


def _narrow(
    table_name: str,
    candidates: List[Any],
    search_criteria: Dict[str, Any],
    capacity: Optional[Union[int, float]],
    date: Optional[DateLike],
) -> Tuple[List[Any], Optional[float]]:
    matching = candidates
    compared_capacity = None
    retried = False
    if capacity is not None:
        matching, compared_capacity, retried = filter_by_capacity(candidates, capacity)
    if date is not None:
        matching = filter_by_date(matching, date)
    # only report the lowered capacity when it produced the result
    if retried and matching:
        logger.warning(
            f"No capacity band contained {capacity}; matched only after lowering "
            f"it to {compared_capacity:g}. Search criteria: {search_criteria}",
            extra={"table": table_name},
        )
    return matching, compared_capacity


def _warn_ambiguous(table_name, search_criteria, capacity, date, matching) -> None:
    listing = "\n".join(str(thaw(record)) for record in matching)
    logger.warning(
        f"Find object search criteria returned {len(matching)} results, "
        f"the first one will be returned.\n"
        f" Search criteria: {_describe(table_name, search_criteria, capacity, date)}\n"
        f" All results:\n{listing}",
        extra={"table": table_name},
    )


def find_objects(
    corpus: Mapping,
    table_name: str,
    search_criteria: Dict[str, Any],
    capacity: Optional[Union[int, float]] = None,
    date: Optional[DateLike] = None,
) -> List[Mapping]:
    """
    All records in a table that meet the search criteria, in table order.

    Args:
        corpus: Loaded Corpus (or plain table name -> table JSON mapping)
        table_name: Table to search (e.g. "motors")
        search_criteria: Field -> required value
        capacity: Optional capacity that must fall within the record's band
        date: Optional date that must fall within the record's date range

    Raises:
        TableNotFound: If the table name is absent
    """
    store = resolve_table(corpus, table_name)
    criteria = _criteria_keys(corpus, search_criteria)
    candidates = [record for record in store if matches_criteria(record, criteria)]
    matching, _ = _narrow(table_name, candidates, criteria, capacity, date)
    return matching


def find_object(
    corpus: Mapping,
    table_name: str,
    search_criteria: Dict[str, Any],
    capacity: Optional[Union[int, float]] = None,
    date: Optional[DateLike] = None,
) -> Optional[Mapping]:
    """
    The first record that meets the search criteria, or None.

    More than one match is tolerated: the first in table order is returned
    and all matches are logged as a warning.

    Example:
        motor = find_object(corpus, "motors", {
            "template": "90.1-2013",
            "number_of_poles": 4.0,
            "type": "Enclosed",
        }, capacity=2.5)
    """
    matching = find_objects(corpus, table_name, search_criteria, capacity, date)
    return _pick_first(table_name, search_criteria, capacity, date, matching)


def _pick_first(table_name, search_criteria, capacity, date, matching) -> Optional[Mapping]:
    if not matching:
        logger.debug(
            f"Search criteria returned no results. "
            f"{_describe(table_name, search_criteria, capacity, date)}"
        )
        return None
    if len(matching) > 1:
        _warn_ambiguous(table_name, search_criteria, capacity, date, matching)
    return matching[0]


class StandardsLookup:
    """
    Load-once, query-many access to a Corpus.

    With indexing on, the first query for a given (table, criteria keys)
    pair builds a PredicateIndex; later queries on the same keys probe it
    instead of scanning. Results and tie-break order are the same as the
    linear scan. Tables or values that cannot be hashed fall back to scanning.

    The corpus is never modified, so one instance can serve several threads;
    the index cache is guarded by a lock.
    """

    def __init__(self, corpus: Corpus, use_index: Optional[bool] = None):
        self.corpus = corpus
        self.use_index = settings.use_index if use_index is None else use_index
        self._indexes: Dict[Tuple[str, Tuple[str, ...]], Optional[PredicateIndex]] = {}
        self._lock = threading.Lock()

    def table(self, table_name: str) -> RecordStore:
        """Get a table by name (raises TableNotFound)."""
        return resolve_table(self.corpus, table_name)

    def _index_for(self, table_name: str, store: RecordStore, keys: Tuple[str, ...]) -> Optional[PredicateIndex]:
        cache_key = (table_name, keys)
        with self._lock:
            if cache_key not in self._indexes:
                index = build_index(store.records, keys)
                if index is None:
                    logger.debug(f"Table '{table_name}' not indexable on {keys}; scanning instead")
                self._indexes[cache_key] = index
            return self._indexes[cache_key]

    def _candidates(self, table_name: str, criteria: Dict[str, Any]) -> List[Any]:
        store = self.table(table_name)
        if self.use_index:
            index = self._index_for(table_name, store, tuple(sorted(criteria)))
            if index is not None:
                try:
                    return [store.records[i] for i in index.candidates(criteria)]
                except UnindexableError:
                    pass
        return [record for record in store if matches_criteria(record, criteria)]

    def find_all(
        self,
        table_name: str,
        search_criteria: Dict[str, Any],
        capacity: Optional[Union[int, float]] = None,
        date: Optional[DateLike] = None,
    ) -> List[Mapping]:
        """All matching records in table order (see `find_objects`)."""
        criteria = _criteria_keys(self.corpus, search_criteria)
        candidates = self._candidates(table_name, criteria)
        matching, _ = _narrow(table_name, candidates, criteria, capacity, date)
        return matching

    def find(
        self,
        table_name: str,
        search_criteria: Dict[str, Any],
        capacity: Optional[Union[int, float]] = None,
        date: Optional[DateLike] = None,
    ) -> Optional[Mapping]:
        """First matching record or None (see `find_object`)."""
        matching = self.find_all(table_name, search_criteria, capacity, date)
        return _pick_first(table_name, search_criteria, capacity, date, matching)

    def validate(self) -> List[str]:
        """Run the integrity checks over the corpus."""
        from ..validation.integrity import validate
        return validate(self.corpus)

    @property
    def index_count(self) -> int:
        return sum(1 for index in self._indexes.values() if index is not None)
