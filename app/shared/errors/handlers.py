"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses through map_error.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.domain.management.errors import FieldError, ManagementDomainError
from app.shared.errors.mapper import (
    HTTP_401,
    HTTP_404,
    HTTP_405,
    HTTP_413,
    HTTP_500,
    MALFORMED_REQUEST,
    METHOD_NOT_ALLOWED,
    NOT_FOUND,
    PAYLOAD_TOO_LARGE,
    UNAUTHORIZED,
    ErrorBody,
    malformed_request,
    map_error,
)

logger = logging.getLogger(__name__)

MALFORMED_VALUE = "MALFORMED_VALUE"

# Framework HTTP errors with a dedicated code; other 4xx are MALFORMED_REQUEST
HTTP_ERROR_CODES = {
    HTTP_401: UNAUTHORIZED,
    HTTP_404: NOT_FOUND,
    HTTP_405: METHOD_NOT_ALLOWED,
    HTTP_413: PAYLOAD_TOO_LARGE,
}


def error_response(request: Request, body: ErrorBody, headers: dict | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    return JSONResponse(
        status_code=body.status,
        content=body.to_dict(path=request.url.path),
        headers=headers,
    )


def _pydantic_field_errors(exc: RequestValidationError) -> list[FieldError]:
    """Turn pydantic error entries into field errors, skipping the 'body' prefix."""
    field_errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field_errors.append(
            FieldError(
                field=".".join(loc) or "body",
                code=MALFORMED_VALUE,
                message=error.get("msg", "Invalid value"),
            )
        )
    return field_errors


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ManagementDomainError)
    async def handle_domain_error(
        request: Request, exc: ManagementDomainError
    ) -> JSONResponse:
        """Handle every domain error through the shared mapper."""
        body = map_error(exc)
        logger.warning(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )
        return error_response(request, body)

    @app.exception_handler(RequestValidationError)
    async def handle_malformed_request(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle bodies that are not JSON or carry wrongly typed values."""
        field_errors = _pydantic_field_errors(exc)
        logger.warning(
            "Malformed request on %s: fields=%s",
            request.url.path,
            [e.field for e in field_errors],
        )
        return error_response(request, malformed_request(field_errors))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle framework HTTP errors (unknown routes, wrong methods, bad credentials)."""
        code = HTTP_ERROR_CODES.get(exc.status_code)
        if code is None:
            code = MALFORMED_REQUEST if exc.status_code < HTTP_500 else "HTTP_ERROR"
        body = ErrorBody(exc.status_code, code, str(exc.detail))
        return error_response(request, body, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return error_response(request, map_error(exc))
