"""Repository for organizations and their member tokens."""

from sqlalchemy import select

from visor.db.models.organization import OrganizationRow, OrganizationTokenRow
from visor.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[OrganizationRow]):
    model_class = OrganizationRow

    async def get(self, name: str) -> OrganizationRow | None:
        return await self.session.get(OrganizationRow, name)

    async def register(
        self, name: str, display_name: str, description: str | None = None
    ) -> OrganizationRow:
        return await self.add(
            "register the organization",
            name=name,
            display_name=display_name,
            description=description,
        )


class OrganizationTokenRepository(BaseRepository[OrganizationTokenRow]):
    model_class = OrganizationTokenRow

    async def get_by_hash(self, token_hash: str) -> OrganizationTokenRow | None:
        stmt = select(OrganizationTokenRow).where(
            OrganizationTokenRow.token_hash == token_hash,
            OrganizationTokenRow.is_active.is_(True),
        )
        result = await self._execute(stmt, "look up the member token")
        return result.scalar_one_or_none()

    async def issue(self, token_id: str, organization: str, handle: str, token_hash: str) -> OrganizationTokenRow:
        return await self.add(
            "issue the member token",
            token_id=token_id,
            organization=organization,
            handle=handle,
            token_hash=token_hash,
        )
