"""Pydantic models for VISOR reports and their lifecycle requests."""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from visor.models.common import CamelModel

# One OM marker slot: a coordinate value, a label, or empty
Marker = int | float | str | None

OM_MARKER_COUNT = 6


class Navigation(CamelModel):
    """Navigation scope of a report; extra keys are preserved."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    system: str = Field(..., min_length=1)
    stellar_object: str = Field(..., min_length=1)
    planet_level_object: str | None = None


class ReportInput(CamelModel):
    """Validated create/update body.

    Unknown keys are ignored, which also drops any client-supplied
    ``approved`` value: approval is only reachable through the approve
    operation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    report_name: str = Field(..., min_length=1)
    published: bool = False
    visor_location: dict[str, Any]
    report_meta: dict[str, Any]
    location_details: dict[str, Any]
    navigation: Navigation
    om_markers: list[Marker] | None = Field(None, min_length=OM_MARKER_COUNT, max_length=OM_MARKER_COUNT)

    @field_validator("published", mode="before")
    @classmethod
    def _normalize_published(cls, value: Any) -> bool:
        """Accept a bool or the string token ``"true"``; any other string is False."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value == "true"
        raise ValueError("published must be a string token or a boolean")

    @field_validator("report_name")
    @classmethod
    def _report_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("reportName must not be blank")
        return value


class Report(CamelModel):
    """A stored VISOR report as returned to clients."""

    id: str
    organization: str
    published: bool
    approved: bool
    report_name: str
    visor_location: dict[str, Any]
    report_meta: dict[str, Any]
    location_details: dict[str, Any]
    navigation: dict[str, Any]
    om_markers: list[Marker] | None = None
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApproveRequest(CamelModel):
    id: str = Field(..., min_length=1)
    approve_reason: str = Field(..., min_length=1)
    approver_handle: str | None = None


class DeleteRequest(CamelModel):
    id: str = Field(..., min_length=1)
    deletion_reason: str = Field(..., min_length=1)


class SimilarityRequest(CamelModel):
    """Body of the OM similarity check."""

    oms: list[Marker] = Field(..., min_length=OM_MARKER_COUNT, max_length=OM_MARKER_COUNT)
    system: str = Field(..., min_length=1)
    stellar_object: str = Field(..., min_length=1)
    planet_level_object: str | None = None
    exclude_id: str | None = None
