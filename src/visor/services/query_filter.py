"""Query filter builder for report listings.

Translates a partially specified :class:`ReportFilter` into a
:class:`~visor.repositories.report_repo.PredicatePlan` over one
organization's reports. Criteria are ANDed; an absent criterion leaves that
dimension unconstrained.

Policies:

* ``name`` is a case-insensitive substring match on ``reportName``.
* ``published`` matches the stored flag rendered as ``"true"``/``"false"``,
  case-sensitively; ``approved`` does the same case-insensitively.
* ``location``/``meta`` are structural partial matches against
  ``visorLocation``/``reportMeta``.
* ``keyword`` is a case-insensitive containment check in ``reportName`` and
  in the JSON text of ``reportMeta``.

Case-insensitive criteria compare casefolded text stored alongside each
report, so they run in SQL with the same Unicode folding on every backend.
Only ``location`` and ``meta`` are checked in-process.
* ``from`` offsets into the matched set; ``to`` is an exclusive end index and
  wins over ``length`` when both are given.
"""

import json
from collections.abc import Mapping
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import false, or_

from visor.db.models.report import ReportRow
from visor.errors.exceptions import ValidationError
from visor.models.report import Report
from visor.repositories.report_repo import PredicatePlan, ReportRepository, fold

_FLAG_TOKENS = ("true", "false")


class ReportFilter(BaseModel):
    """Listing criteria; every field is optional."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = None
    published: str | None = None
    location: dict[str, Any] | None = None
    meta: dict[str, Any] | None = None
    approved: str | None = None
    keyword: str | None = None
    length: int | None = Field(None, ge=0)
    from_: int | None = Field(None, alias="from", ge=0)
    to: int | None = Field(None, ge=0)

    @field_validator("name", "published", "approved", "keyword", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and value == "":
            return None
        return value

    @field_validator("location", "meta", mode="before")
    @classmethod
    def _parse_json_object(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError(f"not valid JSON: {exc.msg}") from exc
        if not isinstance(value, dict):
            raise ValueError("must be a JSON object")
        return value

    @classmethod
    def parse(cls, params: Mapping[str, Any]) -> "ReportFilter":
        """Validate raw query parameters, raising ValidationError on malformed input."""
        try:
            return cls.model_validate(dict(params))
        except pydantic.ValidationError as exc:
            details = [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in exc.errors()
            ]
            raise ValidationError("The report filter is malformed.", details) from exc


def partial_match(expected: Mapping[str, Any], actual: Any) -> bool:
    """True when every key/value in ``expected`` is present and equal in ``actual``.

    Nested objects are compared with the same partial rule; extra keys on
    ``actual`` are ignored.
    """
    if not isinstance(actual, Mapping):
        return False
    for key, value in expected.items():
        if key not in actual:
            return False
        candidate = actual[key]
        if isinstance(value, Mapping):
            if not partial_match(value, candidate):
                return False
        elif isinstance(value, bool) or isinstance(candidate, bool):
            if type(value) is not type(candidate) or value != candidate:
                return False
        elif candidate != value:
            return False
    return True


def _flag_clause(column, token: str):
    if token not in _FLAG_TOKENS:
        return false()
    return column.is_(token == "true")


def _location_check(location: dict[str, Any]):
    return lambda report: partial_match(location, report.visor_location)


def _meta_check(meta: dict[str, Any]):
    return lambda report: partial_match(meta, report.report_meta)


def build_plan(criteria: ReportFilter) -> PredicatePlan:
    """Translate filter criteria into SQL clauses plus in-process residuals."""
    plan = PredicatePlan()
    if criteria.name is not None:
        plan.clauses.append(ReportRow.name_folded.contains(fold(criteria.name), autoescape=True))
    if criteria.published is not None:
        plan.clauses.append(_flag_clause(ReportRow.published, criteria.published))
    if criteria.approved is not None:
        plan.clauses.append(_flag_clause(ReportRow.approved, criteria.approved.lower()))
    if criteria.location:
        plan.residuals.append(_location_check(criteria.location))
    if criteria.meta:
        plan.residuals.append(_meta_check(criteria.meta))
    if criteria.keyword is not None:
        needle = fold(criteria.keyword)
        plan.clauses.append(
            or_(
                ReportRow.name_folded.contains(needle, autoescape=True),
                ReportRow.meta_folded.contains(needle, autoescape=True),
            )
        )
    return plan


def page_bounds(criteria: ReportFilter, max_page_length: int) -> tuple[int, int]:
    """Return ``(offset, limit)`` into the matched set.

    ``to`` takes precedence over ``length``; without either the page is
    capped at ``max_page_length``.
    """
    offset = criteria.from_ or 0
    if criteria.to is not None:
        limit = max(criteria.to - offset, 0)
    elif criteria.length is not None:
        limit = criteria.length
    else:
        limit = max_page_length
    return offset, min(limit, max_page_length)


async def filter_reports(
    store: ReportRepository,
    organization: str,
    criteria: ReportFilter,
    max_page_length: int,
) -> tuple[list[Report], int]:
    """Run a filtered listing; no matches yields ``([], 0)``, never an error."""
    plan = build_plan(criteria)
    offset, limit = page_bounds(criteria, max_page_length)
    return await store.query(organization, plan, offset=offset, limit=limit)
