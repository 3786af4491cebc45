"""OM marker similarity (duplicate detection).

Two reports at the same navigational location are similar when at least one
of the six OM marker slots is filled in both. With a threshold configured,
numeric markers in a shared slot must also lie within that distance of each
other; non-numeric markers keep the presence rule.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from visor.errors.exceptions import ValidationError
from visor.models.report import OM_MARKER_COUNT, Marker, Report
from visor.repositories.report_repo import ReportRepository

logger = logging.getLogger(__name__)


@dataclass
class SimilarityResult:
    reports: list[Report] = field(default_factory=list)

    @property
    def overlaps_found(self) -> bool:
        return bool(self.reports)


def is_present(marker: Marker) -> bool:
    """A marker slot counts as filled unless it is null or a blank string."""
    if marker is None:
        return False
    if isinstance(marker, str):
        return bool(marker.strip())
    return True


def _is_number(marker: Marker) -> bool:
    return isinstance(marker, (int, float)) and not isinstance(marker, bool)


def _slot_overlaps(a: Marker, b: Marker, threshold: float | None) -> bool:
    if not (is_present(a) and is_present(b)):
        return False
    if threshold is not None and _is_number(a) and _is_number(b):
        return abs(a - b) <= threshold
    return True


def markers_overlap(
    candidate: Sequence[Marker],
    existing: Sequence[Marker] | None,
    threshold: float | None = None,
) -> bool:
    """True when some slot index is filled in both marker tuples."""
    if not existing:
        return False
    return any(
        _slot_overlaps(a, b, threshold)
        for a, b in zip(candidate, existing)
    )


async def find_similar(
    store: ReportRepository,
    organization: str,
    om_markers: Sequence[Marker],
    system: str,
    stellar_object: str,
    planet_level_object: str | None = None,
    *,
    exclude_id: str | None = None,
    threshold: float | None = None,
) -> SimilarityResult:
    """Return every report in the same navigation scope whose markers overlap."""
    if len(om_markers) != OM_MARKER_COUNT:
        raise ValidationError(f"omMarkers must contain exactly {OM_MARKER_COUNT} entries")

    candidates = await store.list_in_scope(organization, system, stellar_object, planet_level_object)
    similar = [
        report
        for report in candidates
        if report.id != exclude_id and markers_overlap(om_markers, report.om_markers, threshold)
    ]
    logger.debug(
        "Similarity check in %s/%s/%s: %d candidates, %d overlapping",
        system, stellar_object, planet_level_object, len(candidates), len(similar),
    )
    return SimilarityResult(reports=similar)
