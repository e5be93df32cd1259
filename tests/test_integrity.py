"""
Tests for the integrity validator.

Run with: pytest tests/test_integrity.py -v
"""

import pytest

from standards_db.core.models import Corpus
from standards_db.validation.integrity import (
    check_duplicate_rows,
    check_name_characters,
    check_reverse_equal,
    check_reversed_constructions,
    check_schedule_references,
    check_unique_names,
    validate,
)


def make_corpus(**tables) -> Corpus:
    return Corpus.from_dict(tables)


class TestUniqueNames:
    """Test name uniqueness per table."""

    def test_repeated_name_reported_once(self):
        corpus = make_corpus(widgets=[{"name": "A"}, {"name": "A"}, {"name": "B"}])
        errors = check_unique_names(corpus)
        assert len(errors) == 1
        assert "'A'" in errors[0]
        assert "repeated 2 times" in errors[0]
        assert errors[0].startswith("widgets - ")

    def test_schedules_exempt(self):
        corpus = make_corpus(schedules=[{"name": "A"}, {"name": "A"}, {"name": "B"}])
        assert check_unique_names(corpus) == []

    def test_one_violation_per_repeated_name(self):
        corpus = make_corpus(widgets=[
            {"name": "A"}, {"name": "B"}, {"name": "A"}, {"name": "B"}, {"name": "B"},
        ])
        errors = check_unique_names(corpus)
        assert errors == [
            "widgets - the name 'A' is repeated 2 times.  Names must be unique.",
            "widgets - the name 'B' is repeated 3 times.  Names must be unique.",
        ]

    def test_repeated_missing_names_reported_as_empty(self):
        corpus = make_corpus(widgets=[{"name": "A"}, {"name": None}, {"size": 2}])
        assert check_unique_names(corpus) == [
            "widgets - the name '' is repeated 2 times.  Names must be unique.",
        ]

    def test_single_missing_name_not_reported(self):
        corpus = make_corpus(widgets=[{"name": "A"}, {"name": None}])
        assert check_unique_names(corpus) == []

    def test_tables_without_names_skipped(self):
        corpus = make_corpus(motors=[{"type": "Open"}, {"type": "Open"}])
        assert check_unique_names(corpus) == []

    def test_non_mapping_tables_skipped(self):
        corpus = make_corpus(climate_zones=["1A", "1A"], empty=[])
        assert check_unique_names(corpus) == []


class TestDuplicateRows:
    """Test duplicate content under different names."""

    def test_duplicate_content_counted(self):
        corpus = make_corpus(materials=[
            {"name": "Brick 1", "thickness": 4.0, "conductivity": 5.0},
            {"name": "Brick 2", "thickness": 4.0, "conductivity": 5.0},
            {"name": "Brick 3", "thickness": 8.0, "conductivity": 5.0},
            {"name": "Brick 4", "thickness": 4.0, "conductivity": 5.0},
        ])
        errors = check_duplicate_rows(corpus)
        assert errors == [
            "materials - 2 rows with different names but duplicate data out of the 4 rows."
        ]

    def test_denominator_is_rows_in_that_table(self):
        corpus = make_corpus(
            big=[{"name": f"Row {i}", "value": i} for i in range(7)],
            small=[{"name": "X", "value": 1}, {"name": "Y", "value": 1}, {"name": "Z", "value": 2}],
        )
        errors = check_duplicate_rows(corpus)
        assert errors == ["small - 1 rows with different names but duplicate data out of the 3 rows."]

    def test_key_order_does_not_matter(self):
        corpus = make_corpus(materials=[
            {"name": "A", "thickness": 1, "density": 2},
            {"density": 2, "thickness": 1, "name": "B"},
        ])
        assert len(check_duplicate_rows(corpus)) == 1

    def test_int_and_float_values_differ(self):
        corpus = make_corpus(materials=[{"name": "A", "thickness": 1}, {"name": "B", "thickness": 1.0}])
        assert check_duplicate_rows(corpus) == []

    def test_nested_values_compared(self):
        corpus = make_corpus(constructions=[
            {"name": "A", "materials": ["m1", "m2"]},
            {"name": "B", "materials": ["m2", "m1"]},
        ])
        assert check_duplicate_rows(corpus) == []


class TestScheduleReferences:
    """Test space type -> schedule references."""

    def test_valid_references(self, corpus):
        assert check_schedule_references(corpus) == []

    def test_unresolved_reference(self, standards_tables):
        standards_tables["space_types"][1]["lighting_schedule"] = "Warehouse Bldg Light"
        errors = check_schedule_references(Corpus.from_dict(standards_tables))
        assert len(errors) == 1
        assert "Office OpenOffice" in errors[0]
        assert "Warehouse Bldg Light" in errors[0]
        assert "lighting_schedule" in errors[0]

    def test_every_schedule_field_checked(self):
        fields = [
            "lighting_schedule", "occupancy_schedule", "occupancy_activity_schedule",
            "infiltration_schedule", "electric_equipment_schedule", "gas_equipment_schedule",
            "heating_setpoint_schedule", "cooling_setpoint_schedule",
        ]
        space_type = {"name": "Lab"}
        space_type.update({field: f"Missing {field}" for field in fields})
        corpus = make_corpus(space_types=[space_type], schedules=[{"name": "Other"}])
        assert len(check_schedule_references(corpus)) == 8

    def test_null_references_ignored(self):
        corpus = make_corpus(
            space_types=[{"name": "Attic", "lighting_schedule": None}],
            schedules=[{"name": "Other"}],
        )
        assert check_schedule_references(corpus) == []

    def test_missing_schedules_table(self):
        corpus = make_corpus(space_types=[{"name": "Attic", "lighting_schedule": "Sched"}])
        assert len(check_schedule_references(corpus)) == 1

    def test_missing_space_types_table(self):
        assert check_schedule_references(make_corpus(schedules=[{"name": "A"}])) == []


class TestReversedConstructions:
    """Test mirrored interior construction layers."""

    @pytest.fixture
    def constructions(self):
        return {
            "Wall-A": {"name": "Wall-A", "materials": (1, 2, 3)},
            "Wall-B": {"name": "Wall-B", "materials": (3, 2, 1)},
            "Wall-C": {"name": "Wall-C", "materials": (3, 2, 2)},
        }

    @pytest.fixture
    def construction_set(self):
        return {
            "template": "90.1-2013",
            "building_type": "Office",
            "space_type": "ClosedOffice",
            "climate_zone_set": "ClimateZone 1-3",
        }

    def test_reverse_equal_passes(self, constructions, construction_set):
        assert check_reverse_equal("Wall-A", "Wall-B", construction_set, constructions) == []

    def test_reverse_mismatch_fails(self, constructions, construction_set):
        errors = check_reverse_equal("Wall-A", "Wall-C", construction_set, constructions)
        assert len(errors) == 1
        assert "'Wall-A' vs 'Wall-C'" in errors[0]
        assert "90.1-2013-Office-ClosedOffice-ClimateZone 1-3" in errors[0]

    def test_both_null_skipped(self, constructions, construction_set):
        assert check_reverse_equal(None, None, construction_set, constructions) == []

    def test_unresolved_construction(self, constructions, construction_set):
        errors = check_reverse_equal("Wall-A", "Wall-Z", construction_set, constructions)
        assert errors == ["Cannot find construction named 'Wall-Z' in constructions."]

    def test_one_side_null(self, constructions, construction_set):
        errors = check_reverse_equal("Wall-A", None, construction_set, constructions)
        assert errors == ["Cannot find construction named '' in constructions."]

    def test_self_pair_reported_once(self, constructions, construction_set):
        errors = check_reverse_equal("Wall-Q", "Wall-Q", construction_set, constructions)
        assert len(errors) == 1

    def test_floors_pair_with_ceilings(self, corpus):
        assert check_reversed_constructions(corpus) == []

    def test_asymmetric_self_paired_wall(self, standards_tables):
        standards_tables["constructions"][0]["materials"] = ["Gypsum 1/2in", "Air Gap"]
        errors = check_reversed_constructions(Corpus.from_dict(standards_tables))
        assert len(errors) == 1
        assert "'Interior Wall' vs 'Interior Wall'" in errors[0]


class TestNameCharacters:
    """Test forbidden characters in names."""

    def test_comma_in_name(self):
        corpus = make_corpus(space_types=[{"name": "Office, Large"}, {"name": "Office Small"}])
        errors = check_name_characters(corpus)
        assert errors == ["space_types - 'Office, Large' - name includes commas."]

    def test_rows_without_names(self):
        corpus = make_corpus(motors=[{"type": "Open"}, {"name": None}])
        assert check_name_characters(corpus) == []


class TestValidate:
    """Test the full validation run."""

    def test_consistent_corpus(self, corpus):
        assert validate(corpus) == []

    def test_all_checks_run(self):
        corpus = make_corpus(
            widgets=[{"name": "A,1"}, {"name": "A,1"}],
            schedules=[{"name": "S"}],
            space_types=[{"name": "Lab", "lighting_schedule": "Nope"}],
            constructions=[{"name": "C", "materials": ["x", "y"]}],
            construction_sets=[{"interior_walls": "C"}],
        )
        errors = validate(corpus)
        assert any("repeated 2 times" in e for e in errors)
        assert any("duplicate data" in e for e in errors)
        assert any("Invalid schedule called Nope" in e for e in errors)
        assert any("not reverse equal" in e for e in errors)
        assert sum("name includes commas" in e for e in errors) == 2

    def test_violations_in_check_order(self):
        corpus = make_corpus(widgets=[{"name": "A,1"}, {"name": "A,1"}])
        errors = validate(corpus)
        assert "repeated" in errors[0]
        assert "commas" in errors[-1]

    def test_plain_json_mapping(self, standards_tables):
        assert validate(standards_tables) == []

    def test_end_to_end_lookup_then_validate(self, write_table_file, motors_table):
        from standards_db.ingest.corpus_loader import load_corpus
        from standards_db.search.engine import find_object

        path = write_table_file("standards.json", {
            "motors": motors_table,
            "schedules": [{"name": "Office Bldg Light"}],
            "space_types": [
                {"name": "Office ClosedOffice", "lighting_schedule": "Office Bldg Light"},
                {"name": "Office Lobby", "lighting_schedule": "Lobby Light"},
            ],
        })
        corpus = load_corpus([path])

        motor = find_object(corpus, "motors", {"number_of_poles": 4.0, "type": "Enclosed"}, capacity=2.5)
        assert motor["minimum_capacity"] < 2.5 <= motor["maximum_capacity"]

        errors = validate(corpus)
        assert errors == ["Office Lobby - Invalid schedule called Lobby Light is referenced by lighting_schedule."]
