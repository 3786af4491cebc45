"""Report lifecycle: create, update, approve, delete and read paths.

A report starts as a draft, may be updated any number of times, and becomes
read-only once approved; deletion is allowed in every state and also removes
the report's images. Approve and delete write an audit entry carrying the
acting handle and the stated reason before the store is touched and again
with the outcome.
"""

from dataclasses import dataclass, field

from visor.errors.exceptions import ValidationError, VisorError
from visor.logging_config import get_audit_logger
from visor.models.report import Report, ReportInput
from visor.repositories.report_repo import ApprovalState, ReportRepository
from visor.services.image_manager import ImageManager
from visor.services.query_filter import ReportFilter, filter_reports
from visor.services.similarity import SimilarityResult, find_similar


@dataclass
class CreateOutcome:
    report_id: str
    similar: list[Report] = field(default_factory=list)

    @property
    def overlaps_found(self) -> bool:
        return bool(self.similar)


@dataclass
class ApproveOutcome:
    report_id: str
    approved_by: str
    already_approved: bool = False


def _require_reason(reason: str | None, label: str) -> str:
    if not reason or not reason.strip():
        raise ValidationError(f"A non-empty {label} is required.")
    return reason


def _error_code(exc: Exception) -> str:
    return exc.code if isinstance(exc, VisorError) else type(exc).__name__


class ReportLifecycleManager:
    def __init__(
        self,
        store: ReportRepository,
        images: ImageManager,
        logger=None,
        similarity_threshold: float | None = None,
        max_page_length: int = 1000,
    ):
        self.store = store
        self.images = images
        self.logger = logger or get_audit_logger()
        self.similarity_threshold = similarity_threshold
        self.max_page_length = max_page_length

    async def create(self, organization: str, report: ReportInput) -> CreateOutcome:
        """Persist a new draft; overlapping reports come back as an advisory warning."""
        similar: list[Report] = []
        if report.om_markers is not None:
            nav = report.navigation
            result = await self.find_similar(
                organization,
                report.om_markers,
                nav.system,
                nav.stellar_object,
                nav.planet_level_object,
            )
            similar = result.reports

        report_id = await self.store.create(organization, report)
        if similar:
            self.logger.info(
                "report_created_with_similar",
                report_id=report_id,
                similar_ids=[r.id for r in similar],
            )
        return CreateOutcome(report_id=report_id, similar=similar)

    async def get(self, organization: str, report_id: str) -> Report:
        return await self.store.get(organization, report_id)

    async def search(self, organization: str, criteria: ReportFilter) -> tuple[list[Report], int]:
        return await filter_reports(self.store, organization, criteria, self.max_page_length)

    async def find_similar(
        self,
        organization: str,
        om_markers: list,
        system: str,
        stellar_object: str,
        planet_level_object: str | None = None,
        exclude_id: str | None = None,
    ) -> SimilarityResult:
        return await find_similar(
            self.store,
            organization,
            om_markers,
            system,
            stellar_object,
            planet_level_object,
            exclude_id=exclude_id,
            threshold=self.similarity_threshold,
        )

    async def update(
        self,
        organization: str,
        report_id: str,
        report: ReportInput,
        expected_version: int | None = None,
    ) -> Report:
        """Replace a draft report.

        Raises ImmutableStateError for approved reports and ConflictError when
        ``expected_version`` is stale.
        """
        return await self.store.update(organization, report_id, report, expected_version)

    async def approve(
        self,
        organization: str,
        report_id: str,
        reason: str,
        approver_handle: str | None,
        caller_handle: str,
    ) -> ApproveOutcome:
        reason = _require_reason(reason, "approval reason")
        handle = approver_handle or caller_handle
        audit = self.logger.bind(report_id=report_id, acting_handle=handle, reason=reason)
        audit.warning("report_approval_requested")
        try:
            state = await self.store.set_approved(organization, report_id)
        except Exception as exc:
            audit.warning("report_approval_failed", error_code=_error_code(exc))
            raise

        already = state is ApprovalState.ALREADY_APPROVED
        audit.warning("report_approved", already_approved=already)
        return ApproveOutcome(report_id=report_id, approved_by=handle, already_approved=already)

    async def delete(self, organization: str, report_id: str, reason: str, handle: str) -> int:
        """Delete a report in any state; returns the number of images removed."""
        reason = _require_reason(reason, "deletion reason")
        audit = self.logger.bind(report_id=report_id, acting_handle=handle, reason=reason)
        audit.warning("report_deletion_requested")
        try:
            await self.store.delete(organization, report_id)
            removed = await self.images.remove_for_report(organization, report_id)
        except Exception as exc:
            audit.warning("report_deletion_failed", error_code=_error_code(exc))
            raise
        audit.warning("report_deleted", images_removed=removed)
        return removed
