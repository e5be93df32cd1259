"""
Pytest configuration and fixtures for Standards DB tests.

Provides reusable test fixtures for:
- Temporary table files
- A small standards corpus (motors, space types, schedules, constructions)
"""

import json
import logging
import shutil
import tempfile
from pathlib import Path

import pytest

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from standards_db.core.models import Corpus
from standards_db.ingest.corpus_loader import load_corpus


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory for table files, cleaned up after test."""
    tmp = tempfile.mkdtemp(prefix="standards_db_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def write_table_file(temp_dir):
    """Write a dict of tables to a JSON file in temp_dir and return its path."""
    def _write(filename: str, tables: dict) -> Path:
        path = temp_dir / filename
        path.write_text(json.dumps(tables), encoding="utf-8")
        return path
    return _write


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handler changes made by setup_logging (e.g. CLI runs)."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# =============================================================================
# CORPUS FIXTURES
# =============================================================================

@pytest.fixture
def motors_table() -> list:
    """Motor efficiencies banded by capacity (hp)."""
    return [
        {"template": "90.1-2013", "number_of_poles": 4.0, "type": "Enclosed",
         "minimum_capacity": 1.0, "maximum_capacity": 1.5, "nominal_full_load_efficiency": 0.855},
        {"template": "90.1-2013", "number_of_poles": 4.0, "type": "Enclosed",
         "minimum_capacity": 1.5, "maximum_capacity": 3.0, "nominal_full_load_efficiency": 0.865},
        {"template": "90.1-2013", "number_of_poles": 4.0, "type": "Enclosed",
         "minimum_capacity": 3.0, "maximum_capacity": 5.0, "nominal_full_load_efficiency": 0.895},
        {"template": "90.1-2013", "number_of_poles": 6.0, "type": "Enclosed",
         "minimum_capacity": 1.5, "maximum_capacity": 3.0, "nominal_full_load_efficiency": 0.875},
        {"template": "90.1-2013", "number_of_poles": 4.0, "type": "Open",
         "minimum_capacity": 1.5, "maximum_capacity": 3.0, "nominal_full_load_efficiency": 0.865},
    ]


@pytest.fixture
def standards_tables(motors_table) -> dict:
    """A small, fully consistent standards corpus as parsed JSON."""
    return {
        "motors": motors_table,
        "schedules": [
            {"name": "Office Bldg Light", "day_types": "Default", "values": [0.05] * 24},
            {"name": "Office Bldg Light", "day_types": "SmrDsn", "values": [1.0] * 24},
            {"name": "Office Bldg Occ", "day_types": "Default", "values": [0.0] * 24},
        ],
        "space_types": [
            {"template": "90.1-2013", "building_type": "Office", "space_type": "ClosedOffice",
             "name": "Office ClosedOffice",
             "lighting_schedule": "Office Bldg Light", "occupancy_schedule": "Office Bldg Occ",
             "infiltration_schedule": None},
            {"template": "90.1-2013", "building_type": "Office", "space_type": "OpenOffice",
             "name": "Office OpenOffice",
             "lighting_schedule": "Office Bldg Light"},
        ],
        "materials": [
            {"name": "Gypsum 1/2in", "thickness": 0.5},
            {"name": "Air Gap", "thickness": 3.5},
        ],
        "constructions": [
            {"name": "Interior Wall", "materials": ["Gypsum 1/2in", "Air Gap", "Gypsum 1/2in"]},
            {"name": "Interior Floor", "materials": ["Carpet", "Concrete", "Acoustic Tile"]},
            {"name": "Interior Ceiling", "materials": ["Acoustic Tile", "Concrete", "Carpet"]},
        ],
        "construction_sets": [
            {"template": "90.1-2013", "building_type": "Office", "space_type": "ClosedOffice",
             "climate_zone_set": "ClimateZone 1-8",
             "interior_walls": "Interior Wall",
             "interior_floors": "Interior Floor", "interior_ceilings": "Interior Ceiling",
             "interior_doors": None, "interior_operable_windows": None, "interior_fixed_windows": None},
        ],
    }


@pytest.fixture
def corpus(standards_tables) -> Corpus:
    """The small corpus, built in memory."""
    return Corpus.from_dict(standards_tables)


@pytest.fixture
def corpus_files(write_table_file, standards_tables) -> list:
    """The small corpus split over three files, in load order."""
    return [
        write_table_file("OpenStudio_Standards_constructions.json", {
            "materials": standards_tables["materials"],
            "constructions": {"table": standards_tables["constructions"]},
            "construction_sets": standards_tables["construction_sets"],
        }),
        write_table_file("OpenStudio_Standards_motors.json", {"motors": standards_tables["motors"]}),
        write_table_file("OpenStudio_Standards_space_types.json", {
            "schedules": standards_tables["schedules"],
            "space_types": standards_tables["space_types"],
        }),
    ]


@pytest.fixture
def loaded_corpus(corpus_files) -> Corpus:
    """The small corpus, loaded from files."""
    return load_corpus(corpus_files)
