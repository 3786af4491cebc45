"""Master API router."""

from fastapi import APIRouter

from visor.api.routes import health, images, management, reports

api_router = APIRouter()
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(management.router)
api_router.include_router(reports.router)
api_router.include_router(images.router)
