"""
Data models for the standards corpus.

A Corpus maps table names to RecordStores; a RecordStore is the ordered,
read-only sequence of Records parsed from one JSON table; a Record is a
read-only mapping of field name -> value. Nothing here is mutated after
load, so any number of readers can share one Corpus.
"""

import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional, Tuple


# Keys as str or interned str. Mirrors Settings.key_mode.
KEY_MODES = ("string", "interned")

# Name of the wrapper key some tables use: {"table": [...]}
TABLE_WRAPPER_KEY = "table"

Record = Mapping  # Mapping[str, Any]; a MappingProxyType once loaded


# =============================================================================
# ERRORS
# =============================================================================

class StandardsError(Exception):
    """Base class for standards corpus errors."""


class TableNotFound(StandardsError, KeyError):
    """Raised when a lookup names a table the corpus does not hold."""

    def __init__(self, table_name: str, available: Optional[List[str]] = None):
        self.table_name = table_name
        self.available = available or []
        super().__init__(table_name)

    def __str__(self) -> str:
        return f"Table not found in corpus: '{self.table_name}'"


class CorpusLoadError(StandardsError):
    """Raised when a table file cannot be read or parsed. No corpus is produced."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


# =============================================================================
# FREEZING
# =============================================================================

def make_key(key: str, key_mode: str = "string") -> str:
    """Apply the corpus key representation to a single key."""
    if key_mode == "interned":
        return sys.intern(key)
    return key


def freeze_value(value: Any, key_mode: str = "string") -> Any:
    """
    Convert parsed JSON into read-only structures.

    dict -> MappingProxyType (keys per key_mode), list -> tuple,
    scalars unchanged.
    """
    if isinstance(value, dict):
        return MappingProxyType({
            make_key(k, key_mode): freeze_value(v, key_mode)
            for k, v in value.items()
        })
    if isinstance(value, list):
        return tuple(freeze_value(v, key_mode) for v in value)
    return value


# =============================================================================
# RECORD STORE / CORPUS
# =============================================================================

@dataclass(frozen=True)
class RecordStore(Sequence):
    """
    One table's records in source order.

    Attributes:
        name: Table name (e.g. "motors")
        records: Frozen records; non-mapping rows are kept as-is
        wrapped: True if the source used the {"table": [...]} form
    """
    name: str
    records: Tuple[Any, ...] = ()
    wrapped: bool = field(default=False, compare=False)

    @classmethod
    def from_json(cls, name: str, value: Any, key_mode: str = "string") -> "RecordStore":
        """
        Build a store from a parsed top-level table value.

        Raises:
            ValueError: If value is neither a list nor a {"table": [...]} object
        """
        wrapped = False
        if isinstance(value, dict) and TABLE_WRAPPER_KEY in value:
            value = value[TABLE_WRAPPER_KEY]
            wrapped = True
        if not isinstance(value, list):
            raise ValueError(
                f"table '{name}' must be an array of records or an object with a "
                f"'{TABLE_WRAPPER_KEY}' array, got {type(value).__name__}"
            )
        records = tuple(freeze_value(row, key_mode) for row in value)
        return cls(name=name, records=records, wrapped=wrapped)

    def __getitem__(self, index):
        return self.records[index]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.records)

    @property
    def is_tabular(self) -> bool:
        """True if the first row is a mapping (the rule the validator uses)."""
        return bool(self.records) and isinstance(self.records[0], Mapping)

    def __repr__(self) -> str:
        return f"RecordStore(name={self.name!r}, records={len(self.records)})"


class Corpus(Mapping):
    """
    Read-only mapping of table name -> RecordStore.

    Built once by the corpus loader (or `Corpus.from_dict` for in-memory
    data) and passed explicitly to lookups and validation.
    """

    def __init__(
        self,
        tables: Dict[str, RecordStore],
        key_mode: str = "string",
        sources: Optional[List[Path]] = None,
    ):
        if key_mode not in KEY_MODES:
            raise ValueError(f"key_mode must be one of {KEY_MODES}, got {key_mode!r}")
        self._tables = MappingProxyType(dict(tables))
        self.key_mode = key_mode
        self.sources: Tuple[Path, ...] = tuple(sources or ())

    @classmethod
    def from_dict(cls, data: Dict[str, Any], key_mode: str = "string") -> "Corpus":
        """Build a corpus from already-parsed JSON (table name -> table value)."""
        tables = {
            make_key(name, key_mode): RecordStore.from_json(make_key(name, key_mode), value, key_mode)
            for name, value in data.items()
        }
        return cls(tables, key_mode=key_mode)

    def __getitem__(self, table_name: str) -> RecordStore:
        return self._tables[table_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def table(self, table_name: str) -> RecordStore:
        """
        Get a table by name.

        Raises:
            TableNotFound: If the corpus has no such table
        """
        try:
            return self._tables[table_name]
        except KeyError:
            raise TableNotFound(table_name, available=sorted(self._tables)) from None

    @property
    def record_count(self) -> int:
        return sum(len(store) for store in self._tables.values())

    def __repr__(self) -> str:
        return f"Corpus(tables={len(self._tables)}, records={self.record_count}, key_mode={self.key_mode!r})"
