"""Pydantic models for tenant management."""

from dataclasses import dataclass

from pydantic import Field

from visor.models.common import CamelModel


class OrganizationCreate(CamelModel):
    name: str = Field(..., pattern=r"^[A-Za-z0-9_-]{2,128}$")
    display_name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None


class TokenIssueRequest(CamelModel):
    handle: str = Field(..., min_length=1, max_length=200)


@dataclass(frozen=True)
class OrganizationContext:
    """Authenticated caller: the tenant and the member handle acting for it."""

    organization: str
    handle: str
