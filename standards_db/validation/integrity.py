"""
Integrity Validator - Consistency checks over a standards corpus.

Runs every check and collects human-readable violations:
1. Names are unique within each named table (schedules exempt)
2. No two rows hold the same data under different names
3. Space type schedule references resolve to a schedule
4. Paired interior constructions are layer-for-layer reverses
5. Names contain no commas (IDF uses commas as field separators)

Violations are returned as strings, never raised. One failing check does
not stop the others.

Usage:
    violations = validate(corpus)
    for violation in violations:
        print(f"ERROR - {violation}")
"""

import logging
from collections import Counter
from collections.abc import Hashable, Mapping
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..core.models import RecordStore
from ..core.records import NAME_FIELD, canonical, construction_layers, record_name

logger = logging.getLogger(__name__)


# Tables whose rows share names by design
UNIQUENESS_EXEMPT_TABLES = frozenset({"schedules"})

SCHEDULES_TABLE = "schedules"
SPACE_TYPES_TABLE = "space_types"
CONSTRUCTIONS_TABLE = "constructions"
CONSTRUCTION_SETS_TABLE = "construction_sets"

# space_types fields that name a row in the schedules table
SPACE_TYPE_SCHEDULE_FIELDS = [
    "lighting_schedule",
    "occupancy_schedule",
    "occupancy_activity_schedule",
    "infiltration_schedule",
    "electric_equipment_schedule",
    "gas_equipment_schedule",
    "heating_setpoint_schedule",
    "cooling_setpoint_schedule",
]

# construction_sets fields whose constructions are seen from both sides.
# Floors and ceilings are two faces of the same assembly.
REVERSED_CONSTRUCTION_PAIRS = [
    ("interior_operable_windows", "interior_operable_windows"),
    ("interior_fixed_windows", "interior_fixed_windows"),
    ("interior_walls", "interior_walls"),
    ("interior_doors", "interior_doors"),
    ("interior_floors", "interior_ceilings"),
]

# Fields identifying a construction set in messages
CONSTRUCTION_SET_CONTEXT_FIELDS = ["template", "building_type", "space_type", "climate_zone_set"]


def _store(name: str, value: Any) -> Optional[RecordStore]:
    if isinstance(value, RecordStore):
        return value
    try:
        return RecordStore.from_json(name, value)
    except ValueError:
        return None


def _get_table(corpus: Mapping, table_name: str) -> Optional[RecordStore]:
    if table_name not in corpus:
        return None
    return _store(table_name, corpus[table_name])


def _tabular_tables(corpus: Mapping) -> Iterator[Tuple[str, RecordStore]]:
    """Tables whose first row is a mapping; others are skipped with a log line."""
    for table_name, value in corpus.items():
        store = _store(table_name, value)
        if store is None or not store.is_tabular:
            logger.info(f"Skipping {table_name} because its rows aren't mappings")
            continue
        yield table_name, store


def _hashable(value: Any) -> Hashable:
    try:
        hash(value)
    except TypeError:
        return canonical(value)
    return value


def _index_by_name(store: Optional[RecordStore]) -> Dict[Hashable, Mapping]:
    """name -> first row with that name."""
    by_name: Dict[Hashable, Mapping] = {}
    if store is None:
        return by_name
    for row in store:
        if not isinstance(row, Mapping):
            continue
        name = record_name(row)
        if name is None:
            continue
        by_name.setdefault(_hashable(name), row)
    return by_name


# =============================================================================
# CHECKS
# =============================================================================

def check_unique_names(corpus: Mapping) -> List[str]:
    """Each name may appear once per table, except in exempt tables."""
    errors = []
    for table_name, store in _tabular_tables(corpus):
        if NAME_FIELD not in store[0]:
            logger.info(f"Skipping {table_name} because its rows don't have names")
            continue
        if table_name in UNIQUENESS_EXEMPT_TABLES:
            logger.info(f"Skipping {table_name} because rows are non-unique by design")
            continue

        counts = Counter(
            _hashable(record_name(row))
            for row in store
            if isinstance(row, Mapping)
        )
        for name, count in counts.items():
            if count > 1:
                # unnamed rows count as the empty name
                shown = "" if name is None else name
                errors.append(
                    f"{table_name} - the name '{shown}' is repeated {count} times.  "
                    f"Names must be unique."
                )
    return errors


def check_duplicate_rows(corpus: Mapping) -> List[str]:
    """Rows identical apart from their name are reported as a count per table."""
    errors = []
    for table_name, store in _tabular_tables(corpus):
        contents = []
        for row in store:
            if isinstance(row, Mapping):
                row = {k: v for k, v in row.items() if k != NAME_FIELD}
            contents.append(canonical(row))

        total = len(contents)
        duplicates = total - len(set(contents))
        if duplicates > 0:
            errors.append(
                f"{table_name} - {duplicates} rows with different names but duplicate data "
                f"out of the {total} rows."
            )
    return errors


def check_schedule_references(corpus: Mapping) -> List[str]:
    """Every schedule a space type names must exist in the schedules table."""
    space_types = _get_table(corpus, SPACE_TYPES_TABLE)
    if space_types is None:
        logger.info(f"Skipping schedule references because there is no {SPACE_TYPES_TABLE} table")
        return []

    schedule_names = set(_index_by_name(_get_table(corpus, SCHEDULES_TABLE)))
    errors = []
    for space_type in space_types:
        if not isinstance(space_type, Mapping):
            continue
        for field in SPACE_TYPE_SCHEDULE_FIELDS:
            schedule = space_type.get(field)
            if schedule is None:
                continue
            if _hashable(schedule) not in schedule_names:
                errors.append(
                    f"{record_name(space_type)} - Invalid schedule called {schedule} "
                    f"is referenced by {field}."
                )
    return errors


def _construction_set_context(construction_set: Mapping) -> str:
    return "-".join(str(construction_set.get(f)) for f in CONSTRUCTION_SET_CONTEXT_FIELDS)


def check_reverse_equal(
    left: Any,
    right: Any,
    construction_set: Mapping,
    constructions: Dict[Hashable, Mapping],
) -> List[str]:
    """
    Check one construction pair from a construction set.

    Both null is fine. Otherwise both must exist and one's layers must be
    the other's in reverse order.
    """
    if left is None and right is None:
        return []

    errors = []
    names = [left] if left == right else [left, right]
    for name in names:
        if name is None or _hashable(name) not in constructions:
            shown = "" if name is None else name
            errors.append(f"Cannot find construction named '{shown}' in constructions.")
    if errors:
        return errors

    left_layers = construction_layers(constructions[_hashable(left)])
    right_layers = construction_layers(constructions[_hashable(right)])
    if list(left_layers) != list(reversed(right_layers)):
        errors.append(
            f"Layers are not reverse equal, '{left}' vs '{right}' "
            f"from {_construction_set_context(construction_set)}."
        )
    return errors


def check_reversed_constructions(corpus: Mapping) -> List[str]:
    """Interior constructions used from both sides must mirror each other."""
    construction_sets = _get_table(corpus, CONSTRUCTION_SETS_TABLE)
    if construction_sets is None:
        logger.info(f"Skipping reversed constructions because there is no {CONSTRUCTION_SETS_TABLE} table")
        return []

    constructions = _index_by_name(_get_table(corpus, CONSTRUCTIONS_TABLE))
    errors = []
    for construction_set in construction_sets:
        if not isinstance(construction_set, Mapping):
            continue
        for left_field, right_field in REVERSED_CONSTRUCTION_PAIRS:
            errors.extend(check_reverse_equal(
                construction_set.get(left_field),
                construction_set.get(right_field),
                construction_set,
                constructions,
            ))
    return errors


def check_name_characters(corpus: Mapping) -> List[str]:
    """Names must not contain commas."""
    errors = []
    for table_name, store in _tabular_tables(corpus):
        for row in store:
            if not isinstance(row, Mapping):
                continue
            name = record_name(row)
            if isinstance(name, str) and "," in name:
                errors.append(f"{table_name} - '{name}' - name includes commas.")
    return errors


# (title, check) in run order
CHECKS: List[Tuple[str, Callable[[Mapping], List[str]]]] = [
    ("Check that the names are unique in each table", check_unique_names),
    ("Check for duplicate rows with different names", check_duplicate_rows),
    ("Check that space types are referencing valid schedule names", check_schedule_references),
    ("Check that internal constructions have matching reversed constructions", check_reversed_constructions),
    ("Check for commas in names", check_name_characters),
]


def validate(corpus: Mapping) -> List[str]:
    """
    Run every integrity check and return all violations in check order.

    Args:
        corpus: Loaded Corpus (or plain table name -> table JSON mapping)

    Returns:
        Violation messages; empty if the corpus is consistent
    """
    errors: List[str] = []
    for title, check in CHECKS:
        logger.info(f"****{title}****")
        found = check(corpus)
        if found:
            logger.info(f"{len(found)} violation(s) from {check.__name__}")
        errors.extend(found)
    return errors
