"""Tests for report input validation and filter parsing."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from visor.errors.exceptions import ValidationError
from visor.models.report import ReportInput
from visor.services.query_filter import ReportFilter, page_bounds, partial_match

EXAMPLES_DIR = Path(__file__).resolve().parent / "examples"


def load_example(rel_path: str) -> dict:
    return json.loads((EXAMPLES_DIR / rel_path).read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# ReportInput
# ---------------------------------------------------------------------------

def test_report_input_accepts_example():
    report = ReportInput.model_validate(load_example("report/create-report.request.json"))
    assert report.report_name == "Glowing arch near Aberdeen"
    assert report.published is True
    assert report.navigation.stellar_object == "Hurston"
    assert report.om_markers == [12.5, None, None, 40.1, None, None]


def test_report_input_drops_client_approval():
    payload = load_example("report/create-report.request.json")
    assert payload["approved"] is True
    report = ReportInput.model_validate(payload)
    assert "approved" not in report.model_dump(by_alias=True)


@pytest.mark.parametrize("token,expected", [("true", True), ("false", False), ("yes", False), (True, True)])
def test_published_token_normalization(token, expected):
    payload = load_example("report/create-report.request.json")
    payload["published"] = token
    assert ReportInput.model_validate(payload).published is expected


@pytest.mark.parametrize(
    "missing", ["reportName", "visorLocation", "reportMeta", "locationDetails", "navigation"]
)
def test_missing_required_field_is_rejected(missing):
    payload = load_example("report/create-report.request.json")
    del payload[missing]
    with pytest.raises(PydanticValidationError):
        ReportInput.model_validate(payload)


def test_blank_report_name_is_rejected():
    payload = load_example("report/create-report.request.json")
    payload["reportName"] = "   "
    with pytest.raises(PydanticValidationError):
        ReportInput.model_validate(payload)


@pytest.mark.parametrize("markers", [[1, 2, 3], [None] * 7, []])
def test_om_markers_must_have_six_entries(markers):
    payload = load_example("report/create-report.request.json")
    payload["omMarkers"] = markers
    with pytest.raises(PydanticValidationError):
        ReportInput.model_validate(payload)


def test_navigation_requires_system_and_stellar_object():
    payload = load_example("report/create-report.request.json")
    payload["navigation"] = {"system": "Stanton"}
    with pytest.raises(PydanticValidationError):
        ReportInput.model_validate(payload)


def test_navigation_keeps_extra_keys():
    payload = load_example("report/create-report.request.json")
    payload["navigation"]["quantumBeacon"] = "HUR-L2"
    report = ReportInput.model_validate(payload)
    dumped = report.navigation.model_dump(by_alias=True, exclude_none=True)
    assert dumped["quantumBeacon"] == "HUR-L2"
    assert dumped["stellarObject"] == "Hurston"


# ---------------------------------------------------------------------------
# ReportFilter
# ---------------------------------------------------------------------------

def test_filter_parses_query_strings():
    criteria = ReportFilter.parse(
        {
            "name": "arch",
            "location": '{"system": "Stanton"}',
            "meta": '{"visorCode": 3}',
            "from": "2",
            "length": "5",
        }
    )
    assert criteria.name == "arch"
    assert criteria.location == {"system": "Stanton"}
    assert criteria.meta == {"visorCode": 3}
    assert criteria.from_ == 2
    assert criteria.length == 5
    assert criteria.to is None


def test_empty_params_are_unconstrained():
    criteria = ReportFilter.parse({"name": "", "location": ""})
    assert criteria.name is None
    assert criteria.location is None


@pytest.mark.parametrize(
    "params",
    [
        {"location": "{not json"},
        {"meta": "[1, 2]"},
        {"length": "-1"},
        {"from": "abc"},
    ],
)
def test_malformed_filter_raises_validation_error(params):
    with pytest.raises(ValidationError) as exc_info:
        ReportFilter.parse(params)
    assert exc_info.value.code == "IncompleteBody"
    assert exc_info.value.status_code == 400


def test_to_wins_over_length():
    criteria = ReportFilter.parse({"from": "1", "length": "1", "to": "4"})
    assert page_bounds(criteria, max_page_length=100) == (1, 3)


def test_to_before_from_yields_empty_page():
    criteria = ReportFilter.parse({"from": "4", "to": "2"})
    assert page_bounds(criteria, max_page_length=100) == (4, 0)


def test_page_length_is_capped():
    assert page_bounds(ReportFilter(), max_page_length=25) == (0, 25)
    assert page_bounds(ReportFilter.parse({"length": "500"}), max_page_length=25) == (0, 25)


# ---------------------------------------------------------------------------
# partial_match
# ---------------------------------------------------------------------------

def test_partial_match_ignores_extra_report_keys():
    assert partial_match({"system": "Stanton"}, {"system": "Stanton", "stellarObject": "Hurston"})


def test_partial_match_requires_every_key():
    assert not partial_match({"system": "Stanton", "poi": "x"}, {"system": "Stanton"})


def test_partial_match_is_recursive():
    actual = {"coords": {"lat": 1, "lon": 2}, "name": "a"}
    assert partial_match({"coords": {"lat": 1}}, actual)
    assert not partial_match({"coords": {"lat": 3}}, actual)


def test_partial_match_distinguishes_bool_from_number():
    assert not partial_match({"trade": 1}, {"trade": True})
    assert partial_match({"trade": False}, {"trade": False})
