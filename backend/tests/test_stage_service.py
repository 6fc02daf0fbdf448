"""Tests for the stage service - loading and validating the YAML stage catalog."""

import pytest

from dataentry.core.errors import StageCatalogError
from dataentry.services.stage_service import StageService, stage_service

STAGE_YAML = """\
sequence_number: {n}
name: Stage {n}
points_per_correct_field: 10
penalty_per_incorrect_field: 5
fields:
  - id: firstName
    label: First Name
    required: true
expected_values:
  firstName: Michael
"""


def _write_stage(directory, n, body=None):
    (directory / f"stage_{n:02d}.yaml").write_text(body or STAGE_YAML.format(n=n), encoding="utf-8")


def test_packaged_catalog_loads_in_order():
    stages = stage_service.load_stages()
    assert [s.sequence_number for s in stages] == [1, 2, 3, 4, 5]
    assert stages[0].name == "Basic Contact Information"
    assert stages[0].expected_values["email"] == "mjohnson@company.com"
    assert stages[0].points_per_correct_field == 10
    assert stages[0].penalty_per_incorrect_field == 5


def test_packaged_catalog_values_are_strings():
    """Numbers and dates in the YAML must stay exact strings for matching."""
    stage_2 = stage_service.load_stages()[1]
    assert stage_2.expected_values["amount"] == "75000"
    assert stage_2.expected_values["expectedCloseDate"] == "2023-12-31"


def test_packaged_catalog_field_kinds():
    stages = stage_service.load_stages()
    case_stage = stages[2]
    assert case_stage.get_field("reproducible").kind == "checkbox"
    assert case_stage.get_field("priority").options == ["Low", "Medium", "High", "Critical"]
    assert case_stage.field_groups["Assignment"] == ["contactMethod", "assignedTo"]


def test_packaged_catalog_expected_select_values_are_options():
    for stage in stage_service.load_stages():
        for field in stage.fields:
            if field.kind == "select" and field.id in stage.expected_values:
                assert stage.expected_values[field.id] in field.options, (stage.name, field.id)


def test_first_stage_is_timed():
    stages = stage_service.load_stages()
    assert stages[0].is_timed
    assert not stages[1].is_timed


def test_load_stages_returns_fresh_copies():
    first = stage_service.load_stages()
    first[0].completed = True
    first[0].submission["firstName"] = "Michael"

    second = stage_service.load_stages()
    assert second[0].completed is False
    assert second[0].submission == {}
    assert first[0] is not second[0]


def test_list_stages():
    summaries = stage_service.list_stages()
    assert [s.sequence_number for s in summaries] == [1, 2, 3, 4, 5]
    assert summaries[0].field_count == 5
    assert summaries[0].is_timed is True


def test_custom_directory(tmp_path):
    _write_stage(tmp_path, 2)
    _write_stage(tmp_path, 1)
    stages = StageService(tmp_path).load_stages()
    assert [s.name for s in stages] == ["Stage 1", "Stage 2"]


def test_catalog_is_cached(tmp_path):
    _write_stage(tmp_path, 1)
    service = StageService(tmp_path)
    service.load_stages()

    _write_stage(tmp_path, 2)
    assert len(service.load_stages()) == 1

    service.clear_cache()
    assert len(service.load_stages()) == 2


def test_missing_directory(tmp_path):
    with pytest.raises(StageCatalogError):
        StageService(tmp_path / "nope").load_stages()


def test_empty_directory(tmp_path):
    with pytest.raises(StageCatalogError):
        StageService(tmp_path).load_stages()


def test_sequence_gap(tmp_path):
    _write_stage(tmp_path, 1)
    _write_stage(tmp_path, 3)
    with pytest.raises(StageCatalogError, match="1..2"):
        StageService(tmp_path).load_stages()


def test_invalid_yaml(tmp_path):
    _write_stage(tmp_path, 1, body="name: [unclosed")
    with pytest.raises(StageCatalogError):
        StageService(tmp_path).load_stages()


def test_expected_value_for_unknown_field(tmp_path):
    body = STAGE_YAML.format(n=1) + "  lastName: Johnson\n"
    _write_stage(tmp_path, 1, body=body)
    with pytest.raises(StageCatalogError, match="lastName"):
        StageService(tmp_path).load_stages()


def test_duplicate_field_ids(tmp_path):
    body = STAGE_YAML.format(n=1).replace(
        "expected_values:",
        "  - id: firstName\n    label: Again\nexpected_values:",
    )
    _write_stage(tmp_path, 1, body=body)
    with pytest.raises(StageCatalogError, match="duplicate"):
        StageService(tmp_path).load_stages()


def test_select_without_options(tmp_path):
    body = STAGE_YAML.format(n=1).replace("    required: true", "    kind: select\n    required: true")
    _write_stage(tmp_path, 1, body=body)
    with pytest.raises(StageCatalogError):
        StageService(tmp_path).load_stages()


def test_negative_points(tmp_path):
    body = STAGE_YAML.format(n=1).replace("penalty_per_incorrect_field: 5", "penalty_per_incorrect_field: -5")
    _write_stage(tmp_path, 1, body=body)
    with pytest.raises(StageCatalogError):
        StageService(tmp_path).load_stages()
