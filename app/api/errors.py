"""Exception handlers that turn service errors into JSON responses."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.services.errors import SessionError

logger = logging.getLogger(__name__)


def error_body(kind: str, message: str) -> dict:
    return {"error": {"kind": kind, "message": message}}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SessionError)
    async def _session_error_handler(_: Request, exc: SessionError):
        headers = {}
        if exc.status_code == 401:
            headers["WWW-Authenticate"] = "Bearer"
        if exc.retryable:
            headers["Retry-After"] = "1"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.kind, exc.message),
            headers=headers or None,
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_body("internal_error", "Internal server error"),
        )
