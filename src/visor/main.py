"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from visor.config import APP_VERSION, Settings, settings
from visor.db.engine import create_db_engine, create_session_factory, create_tables
from visor.logging_config import configure_logging
from visor.services.auth_gateway import AuthGateway
from visor.services.image_storage import LocalImageStorage

# Configure logging at import time
configure_logging(log_level=settings.log_level, json_output=settings.json_logs)

logger = logging.getLogger(__name__)


def init_app_state(app: FastAPI, engine: AsyncEngine, app_settings: Settings) -> None:
    """Attach engine, session factory and collaborators to ``app.state``."""
    session_factory = create_session_factory(engine)
    app.state.settings = app_settings
    app.state.db_engine = engine
    app.state.db_session_factory = session_factory
    app.state.auth_gateway = AuthGateway(app_settings.admin_api_key, session_factory)
    app.state.image_storage = LocalImageStorage(app_settings.image_storage_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    app_settings: Settings = app.state.settings
    db_url = app_settings.effective_database_url
    engine = create_db_engine(db_url)

    await create_tables(engine)
    init_app_state(app, engine, app_settings)

    logger.info("VISOR API started (db=%s)", "sqlite" if "sqlite" in db_url else "postgresql")
    yield

    await engine.dispose()
    logger.info("VISOR API shutdown complete")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app_settings = app_settings or settings
    app = FastAPI(
        title="VISOR API",
        version=APP_VERSION,
        description="Multi-tenant store for VISOR sighting reports.",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from visor.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    from visor.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from visor.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
