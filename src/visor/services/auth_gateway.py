"""Admin key and organization token verification."""

import hashlib
import hmac
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from visor.errors.exceptions import AuthenticationError, NotFoundError
from visor.models.organization import OrganizationContext
from visor.repositories.organization_repo import OrganizationRepository, OrganizationTokenRepository
from visor.services.id_generator import TOKEN_PREFIX, generate_id, generate_token

logger = logging.getLogger(__name__)


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


class AuthGateway:
    """Resolves credentials; built once per app and shared through ``app.state``."""

    def __init__(self, admin_api_key: str, session_factory: async_sessionmaker[AsyncSession]):
        self._admin_api_key = admin_api_key
        self._session_factory = session_factory

    def verify_admin(self, credential: str | None) -> bool:
        if not credential or not self._admin_api_key:
            return False
        return hmac.compare_digest(credential.encode(), self._admin_api_key.encode())

    async def verify_org(self, credential: str | None) -> OrganizationContext:
        """Map a member token to its organization and handle."""
        if not credential:
            raise AuthenticationError("No X-VISOR-TOKEN provided, please provide this header in order to authenticate.")

        async with self._session_factory() as session:
            token = await OrganizationTokenRepository(session).get_by_hash(hash_token(credential))
            if token is None:
                raise AuthenticationError("The given VISOR token is not valid.")
            org = await OrganizationRepository(session).get(token.organization)
            if org is None or not org.is_active:
                raise AuthenticationError("The organization of this token is not active.")
            return OrganizationContext(organization=org.name, handle=token.handle)

    async def issue_token(self, session: AsyncSession, organization: str, handle: str) -> str:
        """Create a member token and return the raw value; only its hash is kept."""
        org = await OrganizationRepository(session).get(organization)
        if org is None:
            raise NotFoundError("Organization", organization)
        raw = generate_token()
        await OrganizationTokenRepository(session).issue(
            token_id=generate_id(TOKEN_PREFIX),
            organization=organization,
            handle=handle,
            token_hash=hash_token(raw),
        )
        logger.info("Issued token for %s in %s", handle, organization)
        return raw
