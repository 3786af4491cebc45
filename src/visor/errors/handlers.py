"""FastAPI exception handlers producing the VISOR response envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from visor.errors.exceptions import AuthenticationError, PersistenceError, VisorError
from visor.models.common import ResponseCode, envelope

logger = logging.getLogger(__name__)


def _summarize_validation_errors(errors: list[dict]) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query")),
            "message": err.get("msg", ""),
        }
        for err in errors
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(VisorError)
    async def visor_error_handler(request: Request, exc: VisorError):
        trace_id = getattr(request.state, "trace_id", "unknown")
        if isinstance(exc, PersistenceError):
            logger.error(
                "persistence_failure",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "trace_id": trace_id,
                    "reason": str(exc),
                },
            )
        elif isinstance(exc, AuthenticationError):
            logger.warning(
                "authentication_failed",
                extra={"path": request.url.path, "trace_id": trace_id, "reason": str(exc)},
            )
        body = envelope(exc.message, exc.code)
        if exc.details is not None:
            body["data"] = {"details": exc.details}
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=envelope(
                "Please provide a valid request; some fields are missing or malformed.",
                ResponseCode.INCOMPLETE_BODY,
                {"details": _summarize_validation_errors(exc.errors())},
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        trace_id = getattr(request.state, "trace_id", "unknown")
        logger.exception("unhandled_error path=%s trace_id=%s", request.url.path, trace_id)
        return JSONResponse(
            status_code=500,
            content=envelope("An internal error occurred.", ResponseCode.INTERNAL_ERROR),
        )
