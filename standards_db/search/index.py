"""
Predicate Index - Hash lookup for repeated equality searches.

Instead of scanning every row of a table for every query, we group row
positions once per predicate key combination. Each row is filed under a
tuple holding, per key, either its value or WILD (key missing or set to
"Any"), so a query only has to probe the 2^k buckets that could match:
for every key, the query value or WILD.

Results are returned as sorted positions, so the first-in-table-order
tie-break is the same as with a linear scan.
"""

from collections.abc import Mapping
from itertools import product
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.records import WILDCARD


# Indexing more keys than this means probing more than 256 buckets per query
MAX_INDEXED_KEYS = 8


class _Wild:
    """Bucket marker for rows that match any query value for a key."""

    def __repr__(self) -> str:
        return "WILD"


WILD = _Wild()


class UnindexableError(TypeError):
    """Raised when a table or query value cannot be used as a hash key."""


def _signature_value(record: Mapping, key: str) -> Any:
    if key not in record:
        return WILD
    value = record[key]
    if value == WILDCARD:
        return WILD
    return value


class PredicateIndex:
    """
    Row positions of one table grouped by the values of a fixed key tuple.

    Attributes:
        keys: Predicate keys this index covers, sorted
        buckets: Signature tuple -> ascending row positions
        record_count: Rows in the indexed table
    """

    def __init__(self, records: Sequence[Any], keys: Tuple[str, ...]):
        if len(keys) > MAX_INDEXED_KEYS:
            raise UnindexableError(f"Too many predicate keys to index: {len(keys)}")

        self.keys = keys
        self.buckets: Dict[tuple, List[int]] = {}
        self.record_count = len(records)

        for position, record in enumerate(records):
            if not isinstance(record, Mapping):
                continue
            signature = tuple(_signature_value(record, key) for key in keys)
            try:
                bucket = self.buckets.setdefault(signature, [])
            except TypeError as e:
                raise UnindexableError(f"Unhashable value in row {position}: {e}") from e
            bucket.append(position)

    def candidates(self, predicates: Dict[str, Any]) -> List[int]:
        """
        Positions of rows matching every predicate, in table order.

        Raises:
            UnindexableError: If a predicate value is unhashable
        """
        options = [(predicates[key], WILD) for key in self.keys]
        positions: List[int] = []
        try:
            for signature in product(*options):
                positions.extend(self.buckets.get(signature, ()))
        except TypeError as e:
            raise UnindexableError(f"Unhashable predicate value: {e}") from e
        return sorted(set(positions))


def build_index(records: Sequence[Any], keys: Tuple[str, ...]) -> Optional[PredicateIndex]:
    """
    Build an index, or return None if the table cannot be indexed on these keys.
    """
    try:
        return PredicateIndex(records, keys)
    except UnindexableError:
        return None
