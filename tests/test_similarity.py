"""Tests for OM marker similarity.

Covers:
- Presence overlap on a shared slot index; empty and blank slots never overlap
- Scope restriction to system/stellarObject (and planetLevelObject when given)
- Every overlapping report is returned, in creation order
- Optional numeric threshold
- Creation surfaces overlaps as a warning without blocking
"""

import pytest

from visor.errors.exceptions import ValidationError
from visor.models.report import ReportInput
from visor.repositories.report_repo import ReportRepository
from visor.services.image_manager import ImageManager
from visor.services.image_storage import LocalImageStorage
from visor.services.report_lifecycle import ReportLifecycleManager
from visor.services.similarity import find_similar, is_present, markers_overlap

EMPTY = [None] * 6


def sighting(name: str, markers: list | None, stellar_object: str = "Earth", planet: str | None = None) -> ReportInput:
    navigation = {"system": "Sol", "stellarObject": stellar_object}
    if planet:
        navigation["planetLevelObject"] = planet
    return ReportInput.model_validate(
        {
            "reportName": name,
            "published": "true",
            "visorLocation": {"system": "Sol", "stellarObject": stellar_object},
            "reportMeta": {"rsiHandle": "alice"},
            "locationDetails": {},
            "navigation": navigation,
            "omMarkers": markers,
        }
    )


@pytest.fixture
def lifecycle(db_session, tmp_path):
    store = ReportRepository(db_session)
    images = ImageManager(db_session, LocalImageStorage(tmp_path / "images"), max_bytes=1024)
    return ReportLifecycleManager(store, images)


# ---------------------------------------------------------------------------
# Pure marker comparison
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("marker,expected", [(None, False), ("", False), ("  ", False), (0, True), ("A", True), (1.5, True)])
def test_is_present(marker, expected):
    assert is_present(marker) is expected


def test_overlap_on_shared_slot():
    assert markers_overlap([1, None, None, None, None, None], [1, 2, None, None, None, None])


def test_no_overlap_on_disjoint_slots():
    assert not markers_overlap([1, 2, 3, None, None, None], [None, None, None, 4, 5, 6])


def test_values_need_not_be_equal_without_threshold():
    assert markers_overlap([1, None, None, None, None, None], [999, None, None, None, None, None])


def test_missing_existing_markers_never_overlap():
    assert not markers_overlap([1, 2, 3, 4, 5, 6], None)


def test_threshold_bounds_numeric_distance():
    assert markers_overlap([10.0] + EMPTY[1:], [10.4] + EMPTY[1:], threshold=0.5)
    assert not markers_overlap([10.0] + EMPTY[1:], [11.0] + EMPTY[1:], threshold=0.5)
    # Labels fall back to presence
    assert markers_overlap(["OM-1"] + EMPTY[1:], ["OM-3"] + EMPTY[1:], threshold=0.5)


# ---------------------------------------------------------------------------
# Engine against the store
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_sol_scenario(lifecycle):
    r1 = await lifecycle.create("acme", sighting("R1", [1, None, None, None, None, None]))
    assert not r1.overlaps_found

    r2_markers = [1, 2, None, None, None, None]
    r2 = await lifecycle.create("acme", sighting("R2", r2_markers))
    assert r2.overlaps_found
    assert [r.id for r in r2.similar] == [r1.report_id]

    result = await lifecycle.find_similar("acme", r2_markers, "Sol", "Earth", exclude_id=r2.report_id)
    assert result.overlaps_found
    assert [r.id for r in result.reports] == [r1.report_id]

    r3 = await lifecycle.create("acme", sighting("R3", r2_markers, stellar_object="Mars"))
    assert r3.similar == []
    result = await lifecycle.find_similar("acme", r2_markers, "Sol", "Mars", exclude_id=r3.report_id)
    assert not result.overlaps_found
    assert result.reports == []


@pytest.mark.asyncio
async def test_all_overlapping_reports_returned_in_order(lifecycle):
    first = await lifecycle.create("acme", sighting("first", [None, None, 7, None, None, None]))
    await lifecycle.create("acme", sighting("disjoint", [None, None, None, None, None, 5]))
    third = await lifecycle.create("acme", sighting("third", [None, None, 8, None, None, None]))
    await lifecycle.create("acme", sighting("no markers", None))

    result = await lifecycle.find_similar("acme", [None, None, 1, None, None, None], "Sol", "Earth")
    assert [r.id for r in result.reports] == [first.report_id, third.report_id]


@pytest.mark.asyncio
async def test_zero_overlap_excludes_report(lifecycle):
    await lifecycle.create("acme", sighting("far", [None, None, None, None, None, 5]))
    result = await lifecycle.find_similar("acme", [1, 2, 3, 4, 5, None], "Sol", "Earth")
    assert result.reports == []


@pytest.mark.asyncio
async def test_planet_level_object_narrows_scope(lifecycle):
    luna = await lifecycle.create("acme", sighting("crater", [1] + EMPTY[1:], planet="Tycho"))
    other = await lifecycle.create("acme", sighting("ridge", [1] + EMPTY[1:], planet="Copernicus"))

    scoped = await lifecycle.find_similar("acme", [1] + EMPTY[1:], "Sol", "Earth", "Tycho")
    assert [r.id for r in scoped.reports] == [luna.report_id]

    unscoped = await lifecycle.find_similar("acme", [1] + EMPTY[1:], "Sol", "Earth")
    assert [r.id for r in unscoped.reports] == [luna.report_id, other.report_id]


@pytest.mark.asyncio
async def test_similarity_is_tenant_scoped(lifecycle):
    await lifecycle.create("globex", sighting("theirs", [1] + EMPTY[1:]))
    result = await lifecycle.find_similar("acme", [1] + EMPTY[1:], "Sol", "Earth")
    assert result.reports == []


@pytest.mark.asyncio
async def test_marker_count_is_enforced(db_session):
    with pytest.raises(ValidationError):
        await find_similar(ReportRepository(db_session), "acme", [1, 2], "Sol", "Earth")


@pytest.mark.asyncio
async def test_configured_threshold_is_applied(db_session, tmp_path):
    store = ReportRepository(db_session)
    images = ImageManager(db_session, LocalImageStorage(tmp_path / "images"), max_bytes=1024)
    strict = ReportLifecycleManager(store, images, similarity_threshold=0.5)

    near = await strict.create("acme", sighting("near", [10.2] + EMPTY[1:]))
    await strict.create("acme", sighting("far", [20.0] + EMPTY[1:]))

    result = await strict.find_similar("acme", [10.0] + EMPTY[1:], "Sol", "Earth")
    assert [r.id for r in result.reports] == [near.report_id]
