"""
Secure Error Handling

Renders every failure in the response envelope and keeps internal error
details out of production responses.
"""

import os
import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Deployment environment for the whole app; other modules read errors.ENVIRONMENT
ENVIRONMENT = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development"))

GENERIC_SERVER_ERROR = "Internal server error"


def is_production() -> bool:
    return ENVIRONMENT == "production"


def error_response(message: str, status_code: int, headers: Optional[dict] = None) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def log_and_sanitize_error(
    error: Exception,
    context: str,
) -> tuple[str, str]:
    """
    Log full error details server-side and return the message for the client.

    Args:
        error: The exception that occurred
        context: Description of what failed (e.g., "GET /api/v1/articles")

    Returns:
        Tuple of (client_message, error_id). Outside production the client
        message is the raw error text.
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error,
    )

    if is_production():
        return GENERIC_SERVER_ERROR, error_id
    return str(error) or GENERIC_SERVER_ERROR, error_id


def _format_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        # Drop the "body"/"query" prefix from the location
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def setup_error_handlers(app: FastAPI) -> None:
    """
    Register envelope-rendering exception handlers on the app.

    Call before adding any other middleware so the unhandled-error
    catcher is the innermost layer.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail
        message = (
            detail.get("message") if isinstance(detail, dict) else str(detail)
        ) or "Request failed."
        return error_response(
            message=message,
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            message=_format_validation_error(exc),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        message, _ = log_and_sanitize_error(exc, f"{request.method} {request.url.path}")
        return error_response(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        message, _ = log_and_sanitize_error(exc, f"{request.method} {request.url.path}")
        return error_response(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # Innermost middleware: unhandled endpoint errors become 500 envelopes
    # inside the chain. The Exception handler above only sees errors
    # raised by middleware itself.
    @app.middleware("http")
    async def catch_unhandled_errors(request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unexpected_exception_handler(request, exc)
