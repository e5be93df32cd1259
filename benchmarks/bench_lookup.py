"""
Performance benchmarks for corpus loading and record lookup.

Compares the in-memory representations:
- Plain str keys vs sys.intern'ed keys
- Linear scan vs predicate index
- Parse once + search many vs parse per call

Run with: python -m benchmarks.bench_lookup
"""
import json
import shutil
import tempfile
import time
from pathlib import Path
from statistics import mean, stdev

from standards_db.core.config import settings
from standards_db.ingest.corpus_loader import load_corpus, resolve_standards_paths
from standards_db.search.engine import StandardsLookup, find_object


SEARCH_CRITERIA = {
    "template": "90.1-2013",
    "building_type": "Office",
    "space_type": "ClosedOffice",
}

TEMPLATES = ["DOE Ref Pre-1980", "DOE Ref 1980-2004", "90.1-2004", "90.1-2007", "90.1-2010", "90.1-2013"]
BUILDING_TYPES = ["Office", "Retail", "SmallHotel", "LargeHotel", "Hospital", "PrimarySchool", "SecondarySchool"]
SPACE_TYPES = ["ClosedOffice", "OpenOffice", "Conference", "Corridor", "Lobby", "Restroom", "Storage", "Stair"]


def display_break(title: str) -> None:
    """Print a spaced-out section heading."""
    spaced = "    ".join(" ".join(word.upper()) for word in title.split(" "))
    print("\n" + "=" * 80)
    print(spaced.center(80))
    print("=" * 80)


def write_synthetic_corpus(directory: Path) -> list:
    """Write a space_types/schedules corpus shaped like the real one."""
    space_types = []
    for template in TEMPLATES:
        for building_type in BUILDING_TYPES:
            for space_type in SPACE_TYPES:
                space_types.append({
                    "template": template,
                    "building_type": building_type,
                    "space_type": space_type,
                    "name": f"{template} {building_type} {space_type}",
                    "lighting_per_area": 1.0,
                    "lighting_schedule": f"{building_type} BLDG_LIGHT_SCH",
                    "occupancy_schedule": f"{building_type} BLDG_OCC_SCH",
                })
    schedules = [
        {"name": f"{building_type} {suffix}", "day_types": "Default", "values": [0.5] * 24}
        for building_type in BUILDING_TYPES
        for suffix in ("BLDG_LIGHT_SCH", "BLDG_OCC_SCH")
    ]

    paths = [
        directory / "OpenStudio_Standards_space_types.json",
        directory / "OpenStudio_Standards_schedules.json",
    ]
    paths[0].write_text(json.dumps({"space_types": space_types}), encoding="utf-8")
    paths[1].write_text(json.dumps({"schedules": {"table": schedules}}), encoding="utf-8")
    return sorted(paths)


def _timed(func, iterations: int) -> dict:
    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        func()
        times.append((time.perf_counter() - start) * 1000)
    return {
        "iterations": iterations,
        "mean_ms": mean(times),
        "stdev_ms": stdev(times) if len(times) > 1 else 0,
    }


def benchmark_loading(paths: list, iterations: int = 20) -> dict:
    """Load the corpus repeatedly with each key representation."""
    return {
        "Load - strings": _timed(lambda: load_corpus(paths, key_mode="string"), iterations),
        "Load - interned": _timed(lambda: load_corpus(paths, key_mode="interned"), iterations),
    }


def benchmark_searching(paths: list, iterations: int = 1000) -> dict:
    """Search an already-loaded corpus repeatedly."""
    strings = load_corpus(paths, key_mode="string")
    interned = load_corpus(paths, key_mode="interned")
    indexed = StandardsLookup(strings, use_index=True)
    indexed.find("space_types", SEARCH_CRITERIA)  # build the index outside the timing

    def search_each(func):
        def run():
            for _ in range(iterations):
                func()
        return run

    return {
        "Search - strings (scan)": _timed(
            search_each(lambda: find_object(strings, "space_types", SEARCH_CRITERIA)), 1),
        "Search - interned (scan)": _timed(
            search_each(lambda: find_object(interned, "space_types", SEARCH_CRITERIA)), 1),
        "Search - strings (index)": _timed(
            search_each(lambda: indexed.find("space_types", SEARCH_CRITERIA)), 1),
    }


def benchmark_load_once_search_many(paths: list, iterations: int = 1000) -> dict:
    """Load once, then search repeatedly, timing both together."""
    def scan(key_mode):
        def run():
            corpus = load_corpus(paths, key_mode=key_mode)
            for _ in range(iterations):
                find_object(corpus, "space_types", SEARCH_CRITERIA)
        return run

    def index():
        lookup = StandardsLookup(load_corpus(paths), use_index=True)
        for _ in range(iterations):
            lookup.find("space_types", SEARCH_CRITERIA)

    return {
        "Load + search - strings (scan)": _timed(scan("string"), 1),
        "Load + search - interned (scan)": _timed(scan("interned"), 1),
        "Load + search - strings (index)": _timed(index, 1),
    }


def run_benchmarks():
    """Run all lookup benchmarks."""
    temp_dir = None
    config = settings.model_copy(update={"skip_missing_files": True})
    paths = resolve_standards_paths(config) if config.data_dir.exists() else []
    if not paths:
        temp_dir = Path(tempfile.mkdtemp(prefix="standards_db_bench_"))
        paths = write_synthetic_corpus(temp_dir)
        print(f"No standards data in {config.data_dir}; using a synthetic corpus")

    try:
        sections = [
            ("loading only - 20 times", benchmark_loading),
            ("searching only - 1000 times", benchmark_searching),
            ("loading once + searching 1000 times", benchmark_load_once_search_many),
        ]
        for title, func in sections:
            display_break(title)
            print(f"\n{'Benchmark':<35} {'Mean (ms)':<12} {'Stdev':<10} {'Status':<15}")
            print("-" * 80)
            try:
                results = func(paths)
            except Exception as e:
                print(f"{title:<35} {'--':<12} {'--':<10} ERROR: {e}")
                continue
            for name, result in results.items():
                print(f"{name:<35} {result['mean_ms']:<12.3f} {result['stdev_ms']:<10.3f} {'OK':<15}")
        print("=" * 80)
    finally:
        if temp_dir is not None:
            shutil.rmtree(temp_dir, ignore_errors=True)


if __name__ == "__main__":
    run_benchmarks()
