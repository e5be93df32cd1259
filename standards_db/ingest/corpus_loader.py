"""
Corpus Loader - Read standards table files into one Corpus.

Each file is a UTF-8 JSON object mapping table name -> records, either as
a bare array or wrapped as {"table": [...]}. Files are merged in the
order given; a later file's table replaces an earlier table of the same
name outright (no deep merge).

Any unreadable or malformed file aborts the whole load.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..core.config import Settings, settings as default_settings
from ..core.models import KEY_MODES, Corpus, CorpusLoadError, RecordStore, make_key

logger = logging.getLogger(__name__)


def read_table_file(path: Path) -> Dict[str, Any]:
    """
    Read and parse one table file.

    Returns:
        Parsed top-level object (table name -> table value)

    Raises:
        CorpusLoadError: If the file is missing, not UTF-8, not valid JSON,
            or its top level is not an object
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise CorpusLoadError(f"Standards file not found: {path}", path=path) from None
    except OSError as e:
        raise CorpusLoadError(f"Cannot read standards file {path}: {e.strerror or e}", path=path) from e
    except UnicodeDecodeError as e:
        raise CorpusLoadError(f"Standards file is not valid UTF-8: {path} ({e})", path=path) from e
    except json.JSONDecodeError as e:
        raise CorpusLoadError(
            f"Invalid JSON in {path} at line {e.lineno} column {e.colno}: {e.msg}",
            path=path,
        ) from e

    if not isinstance(data, dict):
        raise CorpusLoadError(
            f"Top level of {path} must be an object of tables, got {type(data).__name__}",
            path=path,
        )
    return data


def load_corpus(
    file_paths: Iterable[Union[str, Path]],
    key_mode: str = "string",
) -> Corpus:
    """
    Load and merge table files into a Corpus.

    Args:
        file_paths: Table files, merged in this order (later file wins per table)
        key_mode: "string" for plain keys, "interned" for sys.intern'ed keys

    Returns:
        Read-only Corpus

    Raises:
        CorpusLoadError: On the first unreadable or malformed file
    """
    if key_mode not in KEY_MODES:
        raise ValueError(f"key_mode must be one of {KEY_MODES}, got {key_mode!r}")

    start = time.perf_counter()
    paths = [Path(p) for p in file_paths]
    tables: Dict[str, RecordStore] = {}

    for path in paths:
        data = read_table_file(path)
        for table_name, value in data.items():
            name = make_key(table_name, key_mode)
            try:
                store = RecordStore.from_json(name, value, key_mode)
            except ValueError as e:
                raise CorpusLoadError(f"{path}: {e}", path=path) from e
            if name in tables:
                logger.debug(f"Table '{name}' from {path.name} replaces earlier definition")
            tables[name] = store
        logger.debug(f"Read {len(data)} table(s) from {path.name}")

    corpus = Corpus(tables, key_mode=key_mode, sources=paths)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"Loaded {len(corpus)} tables ({corpus.record_count} records) "
        f"from {len(paths)} file(s) in {elapsed_ms:.1f} ms"
    )
    return corpus


def resolve_standards_paths(config: Optional[Settings] = None) -> List[Path]:
    """
    Table file paths for the configured data directory, in sorted name order.

    Missing files are dropped with a warning when `skip_missing_files` is set;
    otherwise they are left in and fail the load.
    """
    config = config or default_settings
    paths = config.standards_paths
    if not config.skip_missing_files:
        return paths

    present = []
    for path in paths:
        if path.exists():
            present.append(path)
        else:
            logger.warning(f"Skipping missing standards file: {path}")
    return present


def load_standards(config: Optional[Settings] = None) -> Corpus:
    """
    Load the configured standards corpus.

    Usage:
        corpus = load_standards()
        lookup = StandardsLookup(corpus)
    """
    config = config or default_settings
    paths = resolve_standards_paths(config)
    if not paths:
        raise CorpusLoadError(f"No standards files found in {config.data_dir}")
    return load_corpus(paths, key_mode=config.key_mode)
