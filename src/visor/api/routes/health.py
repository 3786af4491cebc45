"""Health check and banner endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy import text

from visor.config import APP_VERSION

router = APIRouter()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def banner():
    return f"<h1>VISOR Backend v{APP_VERSION}</h1>\n<h2>Multi-tenant VISOR report store</h2>"


@router.get("/health")
async def health_check():
    """Liveness: always 200 while the process runs."""
    return {"status": "healthy", "service": "visor-api", "version": APP_VERSION}


@router.get("/health/ready")
async def readiness(request: Request):
    """Readiness: checks database connectivity."""
    try:
        async with request.app.state.db_session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        return JSONResponse(status_code=503, content={"status": "not_ready", "database": f"error: {exc}"})
    return {"status": "ready", "database": "ok"}
