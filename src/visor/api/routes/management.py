"""Admin-only tenant management routes."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from visor.dependencies import DBSession, RequireAdmin, get_auth_gateway
from visor.errors.exceptions import ConflictError
from visor.models.common import envelope
from visor.models.organization import OrganizationCreate, TokenIssueRequest
from visor.repositories.organization_repo import OrganizationRepository
from visor.services.auth_gateway import AuthGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Management"], dependencies=[RequireAdmin])


@router.post("/organizations", status_code=201)
async def create_organization(body: OrganizationCreate, db: DBSession) -> JSONResponse:
    repo = OrganizationRepository(db)
    if await repo.get(body.name):
        raise ConflictError(f"Organization '{body.name}' already exists")

    await repo.register(
        name=body.name,
        display_name=body.display_name,
        description=body.description,
    )
    await db.commit()
    logger.info("Registered organization %s", body.name)
    return JSONResponse(
        status_code=201,
        content=envelope("Successfully registered the organization.", data={"name": body.name}),
    )


@router.post("/organizations/{name}/tokens", status_code=201)
async def issue_token(
    name: str,
    body: TokenIssueRequest,
    db: DBSession,
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> JSONResponse:
    token = await gateway.issue_token(db, name, body.handle)
    await db.commit()
    return JSONResponse(
        status_code=201,
        content=envelope(
            "Successfully issued a token. Store it now, it cannot be shown again.",
            data={"organization": name, "handle": body.handle, "token": token},
        ),
    )
