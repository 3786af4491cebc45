"""Report store adapter.

Every method is scoped to one organization. Mutations on approval state go
through single conditional ``UPDATE`` statements so that an update racing an
approval can never both succeed.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from sqlalchemy import ColumnElement, delete, func, select, update
from visor.db.models.report import ReportRow
from visor.errors.exceptions import (
    ConflictError,
    ImmutableStateError,
    NotFoundError,
)
from visor.models.report import Report, ReportInput
from visor.repositories.base import BaseRepository
from visor.services.id_generator import REPORT_PREFIX, generate_id


@dataclass
class PredicatePlan:
    """Query plan produced by the filter builder.

    ``clauses`` are pushed down to SQL; ``residuals`` are evaluated in-process
    on the rows the clauses let through. Both lists are ANDed.
    """

    clauses: list[ColumnElement[bool]] = field(default_factory=list)
    residuals: list[Callable[[Report], bool]] = field(default_factory=list)

    def matches(self, report: Report) -> bool:
        return all(check(report) for check in self.residuals)


def fold(text: str) -> str:
    """Case-insensitive search form of a string, shared by writes and filters."""
    return text.casefold()


def meta_search_text(report_meta: dict) -> str:
    return fold(json.dumps(report_meta, ensure_ascii=False, sort_keys=True))


class ApprovalState(StrEnum):
    APPROVED = "approved"
    ALREADY_APPROVED = "already_approved"


def to_report(row: ReportRow) -> Report:
    """Convert a ReportRow to the client-facing model."""
    return Report(
        id=row.report_id,
        organization=row.organization,
        published=row.published,
        approved=row.approved,
        report_name=row.report_name,
        visor_location=row.visor_location,
        report_meta=row.report_meta,
        location_details=row.location_details,
        navigation=row.navigation,
        om_markers=row.om_markers,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_fields(report: ReportInput) -> dict:
    navigation = report.navigation.model_dump(by_alias=True, exclude_none=True)
    return {
        "published": report.published,
        "report_name": report.report_name,
        "name_folded": fold(report.report_name),
        "visor_location": report.visor_location,
        "report_meta": report.report_meta,
        "meta_folded": meta_search_text(report.report_meta),
        "location_details": report.location_details,
        "navigation": navigation,
        "nav_system": report.navigation.system,
        "nav_stellar_object": report.navigation.stellar_object,
        "nav_planet_level_object": report.navigation.planet_level_object,
        "om_markers": report.om_markers,
    }


class ReportRepository(BaseRepository[ReportRow]):
    model_class = ReportRow

    async def _get_row(self, organization: str, report_id: str) -> ReportRow | None:
        stmt = (
            select(ReportRow)
            .where(ReportRow.report_id == report_id, ReportRow.organization == organization)
            .execution_options(populate_existing=True)
        )
        result = await self._execute(stmt, "read the VISOR report")
        return result.scalar_one_or_none()

    async def get(self, organization: str, report_id: str) -> Report:
        row = await self._get_row(organization, report_id)
        if row is None:
            raise NotFoundError("Report", report_id)
        return to_report(row)

    async def create(self, organization: str, report: ReportInput) -> str:
        """Persist a new, unapproved report and return its id."""
        report_id = generate_id(REPORT_PREFIX)
        await self.add(
            "store the VISOR report",
            report_id=report_id,
            organization=organization,
            approved=False,
            version=1,
            **_row_fields(report),
        )
        return report_id

    async def update(
        self,
        organization: str,
        report_id: str,
        report: ReportInput,
        expected_version: int | None = None,
    ) -> Report:
        """Overwrite a draft report; approved reports are never touched."""
        conditions = [
            ReportRow.report_id == report_id,
            ReportRow.organization == organization,
            ReportRow.approved.is_(False),
        ]
        if expected_version is not None:
            conditions.append(ReportRow.version == expected_version)

        stmt = (
            update(ReportRow)
            .where(*conditions)
            .values(version=ReportRow.version + 1, **_row_fields(report))
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, "update the VISOR report")

        if result.rowcount == 0:
            row = await self._get_row(organization, report_id)
            if row is None:
                raise NotFoundError("Report", report_id)
            if row.approved:
                raise ImmutableStateError(report_id)
            raise ConflictError(
                f"Report '{report_id}' is at version {row.version}, not {expected_version}"
            )
        return await self.get(organization, report_id)

    async def set_approved(self, organization: str, report_id: str) -> ApprovalState:
        """Flip a draft to approved in one conditional write."""
        stmt = (
            update(ReportRow)
            .where(
                ReportRow.report_id == report_id,
                ReportRow.organization == organization,
                ReportRow.approved.is_(False),
            )
            .values(approved=True, version=ReportRow.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, "approve the VISOR report")

        if result.rowcount == 0:
            if await self._get_row(organization, report_id) is None:
                raise NotFoundError("Report", report_id)
            return ApprovalState.ALREADY_APPROVED
        return ApprovalState.APPROVED

    async def delete(self, organization: str, report_id: str) -> None:
        stmt = delete(ReportRow).where(
            ReportRow.report_id == report_id,
            ReportRow.organization == organization,
        )
        result = await self._execute(stmt, "delete the VISOR report")
        if result.rowcount == 0:
            raise NotFoundError("Report", report_id)

    async def query(
        self,
        organization: str,
        plan: PredicatePlan,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[Report], int]:
        """Return one page of matching reports in creation order, plus the match total.

        SQL clauses bound the scan. Residual checks run on every row those
        clauses let through, so a plan with residuals reads the whole narrowed
        set before slicing the page.
        """
        conditions = [ReportRow.organization == organization, *plan.clauses]
        stmt = (
            select(ReportRow)
            .where(*conditions)
            .order_by(ReportRow.seq)
            .execution_options(populate_existing=True)
        )

        if not plan.residuals:
            count_stmt = select(func.count(ReportRow.seq)).where(*conditions)
            total = (await self._execute(count_stmt, "count VISOR reports")).scalar() or 0
            page_stmt = stmt.offset(offset)
            if limit is not None:
                page_stmt = page_stmt.limit(limit)
            result = await self._execute(page_stmt, "list VISOR reports")
            return [to_report(row) for row in result.scalars().all()], total

        result = await self._execute(stmt, "list VISOR reports")
        matched = [r for r in (to_report(row) for row in result.scalars().all()) if plan.matches(r)]
        end = None if limit is None else offset + limit
        return matched[offset:end], len(matched)

    async def list_in_scope(
        self,
        organization: str,
        system: str,
        stellar_object: str,
        planet_level_object: str | None = None,
    ) -> list[Report]:
        """Reports at one navigational location that carry OM markers."""
        conditions = [
            ReportRow.organization == organization,
            ReportRow.nav_system == system,
            ReportRow.nav_stellar_object == stellar_object,
            ReportRow.om_markers.is_not(None),
        ]
        if planet_level_object is not None:
            conditions.append(ReportRow.nav_planet_level_object == planet_level_object)
        stmt = (
            select(ReportRow)
            .where(*conditions)
            .order_by(ReportRow.seq)
            .execution_options(populate_existing=True)
        )
        result = await self._execute(stmt, "list VISOR reports in scope")
        return [to_report(row) for row in result.scalars().all()]
