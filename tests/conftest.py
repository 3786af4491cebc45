"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from visor.config import Settings
from visor.db.engine import create_tables
from visor.repositories.organization_repo import OrganizationRepository

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url="sqlite+aiosqlite:///",
        admin_api_key=ADMIN_KEY,
        image_storage_dir=str(tmp_path / "images"),
        max_image_bytes=4096,
        max_page_length=50,
        json_logs=False,
    )


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(db_engine, test_settings):
    """Create a test application instance with in-memory DB."""
    from visor.main import create_app, init_app_state

    _app = create_app(test_settings)
    init_app_state(_app, db_engine, test_settings)
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register_member(app, organization: str, handle: str) -> dict:
    """Register an organization (if needed) plus a member token; return auth headers."""
    async with app.state.db_session_factory() as session:
        repo = OrganizationRepository(session)
        if not await repo.get(organization):
            await repo.register(organization, organization.title())
        token = await app.state.auth_gateway.issue_token(session, organization, handle)
        await session.commit()
    return {"X-VISOR-TOKEN": token}


@pytest.fixture
async def org_headers(app):
    return await register_member(app, "acme", "alice")


@pytest.fixture
async def other_org_headers(app):
    return await register_member(app, "globex", "bob")


@pytest.fixture
def admin_headers():
    return {"X-VISOR-API-KEY": ADMIN_KEY}
