"""
Global exception handlers.

- IdentityError -> its status code and public envelope; internal detail only in logs
- RequestValidationError -> 400 with field-level details
- Exception (catch-all) -> generic 500
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auth_manager.api.middleware.correlation_id import CORRELATION_ID_HEADER
from auth_manager.kernel.errors import IdentityError
from auth_manager.logging_config import get_logger

logger = get_logger(__name__)


def _correlation_id(request: Request) -> Optional[str]:
    return getattr(request.state, "correlation_id", None)


def _respond(request: Request, status_code: int, content: dict) -> JSONResponse:
    headers = {}
    corr_id = _correlation_id(request)
    if corr_id:
        headers[CORRELATION_ID_HEADER] = corr_id
        content["correlation_id"] = corr_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(IdentityError)
    async def identity_error_handler(request: Request, exc: IdentityError):
        if exc.http_status >= 500:
            logger.error(
                "%s: %s",
                type(exc).__name__,
                exc.message,
                extra={"error_code": exc.code, "path": request.url.path},
            )
        else:
            logger.info(
                "%s on %s",
                type(exc).__name__,
                request.url.path,
                extra={"error_code": exc.code},
            )
        return _respond(request, exc.http_status, exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(loc) for loc in e["loc"] if loc != "body"),
                "message": e["msg"],
            }
            for e in exc.errors()
        ]
        return _respond(
            request,
            status.HTTP_400_BAD_REQUEST,
            {
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request data",
                    "details": details,
                },
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s", request.url.path)
        return _respond(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
        )
