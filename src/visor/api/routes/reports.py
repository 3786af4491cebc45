"""VISOR report API routes."""

from fastapi import APIRouter, Query, Request

from visor.dependencies import DBSession, Lifecycle, OrgContext
from visor.models.common import ResponseCode, envelope
from visor.models.report import (
    ApproveRequest,
    DeleteRequest,
    Report,
    ReportInput,
    SimilarityRequest,
)
from visor.services.query_filter import ReportFilter

router = APIRouter(prefix="/visor", tags=["VISOR"])


def _dump(reports: list[Report]) -> list[dict]:
    return [r.model_dump(mode="json", by_alias=True) for r in reports]


@router.post("")
async def create_visor(
    report: ReportInput,
    lifecycle: Lifecycle,
    ctx: OrgContext,
    db: DBSession,
) -> dict:
    outcome = await lifecycle.create(ctx.organization, report)
    await db.commit()

    if outcome.overlaps_found:
        return envelope(
            "Successfully created the VISOR Report. There are reports with similar OM Markers on the same Moon / Planet.",
            ResponseCode.WARNING,
            {"id": outcome.report_id, "similarReports": _dump(outcome.similar)},
        )
    return envelope("Successfully created the VISOR Report.", data={"id": outcome.report_id})


@router.get("")
async def list_or_get_visor(
    request: Request,
    lifecycle: Lifecycle,
    ctx: OrgContext,
    report_id: str | None = Query(None, alias="id"),
) -> dict:
    """Fetch one report with ``?id=``, otherwise run a filtered listing."""
    if report_id:
        report = await lifecycle.get(ctx.organization, report_id)
        return envelope(
            "Successfully fetched the VISOR Report.",
            data=report.model_dump(mode="json", by_alias=True),
        )

    criteria = ReportFilter.parse(request.query_params)
    reports, count = await lifecycle.search(ctx.organization, criteria)
    message = (
        "Successfully filtered the reports."
        if count
        else "No reports found with your settings, please try again with different settings."
    )
    return envelope(message, data={"count": count, "reports": _dump(reports)})


@router.put("")
async def update_visor(
    report: ReportInput,
    lifecycle: Lifecycle,
    ctx: OrgContext,
    db: DBSession,
    report_id: str = Query(..., alias="id", min_length=1),
    version: int | None = Query(None, ge=1),
) -> dict:
    updated = await lifecycle.update(ctx.organization, report_id, report, expected_version=version)
    await db.commit()
    return envelope(
        "Successfully updated the VISOR Report.",
        data={"id": updated.id, "version": updated.version},
    )


@router.post("/approve")
async def approve_visor(
    body: ApproveRequest,
    lifecycle: Lifecycle,
    ctx: OrgContext,
    db: DBSession,
) -> dict:
    outcome = await lifecycle.approve(
        ctx.organization,
        body.id,
        body.approve_reason,
        approver_handle=body.approver_handle,
        caller_handle=ctx.handle,
    )
    await db.commit()
    message = (
        "The VISOR Report was already approved."
        if outcome.already_approved
        else "Successfully approved the VISOR Report."
    )
    return envelope(
        message,
        data={
            "id": outcome.report_id,
            "approvedBy": outcome.approved_by,
            "alreadyApproved": outcome.already_approved,
        },
    )


@router.post("/delete")
async def delete_visor(
    body: DeleteRequest,
    lifecycle: Lifecycle,
    ctx: OrgContext,
    db: DBSession,
) -> dict:
    removed = await lifecycle.delete(ctx.organization, body.id, body.deletion_reason, ctx.handle)
    await db.commit()
    return envelope(
        "Successfully deleted the VISOR Report.",
        data={"id": body.id, "imagesRemoved": removed},
    )


@router.post("/similar")
async def om_similarity(
    body: SimilarityRequest,
    lifecycle: Lifecycle,
    ctx: OrgContext,
) -> dict:
    result = await lifecycle.find_similar(
        ctx.organization,
        body.oms,
        body.system,
        body.stellar_object,
        body.planet_level_object,
        exclude_id=body.exclude_id,
    )
    if result.overlaps_found:
        return envelope(
            "There are reports with similar OM Markers on the same Moon / Planet.",
            ResponseCode.WARNING,
            {"overlapsFound": True, "similarReports": _dump(result.reports)},
        )
    return envelope(
        "No reports found with similar OMs.",
        data={"overlapsFound": False, "similarReports": []},
    )
