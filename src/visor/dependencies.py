"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from visor.errors.exceptions import AuthenticationError
from visor.logging_config import bind_request_context, get_audit_logger
from visor.models.organization import OrganizationContext
from visor.repositories.report_repo import ReportRepository
from visor.services.auth_gateway import AuthGateway
from visor.services.image_manager import ImageManager
from visor.services.report_lifecycle import ReportLifecycleManager


async def get_db(request: Request) -> AsyncGenerator:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_trace_id(request: Request) -> str:
    """Extract trace_id from request state (set by middleware)."""
    return getattr(request.state, "trace_id", "unknown")


def get_auth_gateway(request: Request) -> AuthGateway:
    return request.app.state.auth_gateway


async def get_org_context(
    request: Request,
    x_visor_token: Annotated[str | None, Header()] = None,
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> OrganizationContext:
    """Authenticate an organization member or raise 401."""
    ctx = await gateway.verify_org(x_visor_token)
    request.state.org = ctx
    bind_request_context(get_trace_id(request), ctx.organization, ctx.handle)
    return ctx


async def require_admin(
    x_visor_api_key: Annotated[str | None, Header()] = None,
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> None:
    if not x_visor_api_key:
        raise AuthenticationError(
            "No X-VISOR-API-KEY provided, please provide this header in order to authenticate."
        )
    if not gateway.verify_admin(x_visor_api_key):
        raise AuthenticationError("The given VISOR-Admin-API key is not correct.")


def get_image_manager(request: Request, db: AsyncSession = Depends(get_db)) -> ImageManager:
    settings = request.app.state.settings
    return ImageManager(db, request.app.state.image_storage, settings.max_image_bytes)


def get_lifecycle(
    request: Request,
    db: AsyncSession = Depends(get_db),
    images: ImageManager = Depends(get_image_manager),
    ctx: OrganizationContext = Depends(get_org_context),
) -> ReportLifecycleManager:
    settings = request.app.state.settings
    return ReportLifecycleManager(
        ReportRepository(db),
        images,
        logger=get_audit_logger(organization=ctx.organization, caller=ctx.handle),
        similarity_threshold=settings.similarity_threshold,
        max_page_length=settings.max_page_length,
    )


# Type aliases for dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
OrgContext = Annotated[OrganizationContext, Depends(get_org_context)]
Lifecycle = Annotated[ReportLifecycleManager, Depends(get_lifecycle)]
Images = Annotated[ImageManager, Depends(get_image_manager)]
RequireAdmin = Depends(require_admin)
