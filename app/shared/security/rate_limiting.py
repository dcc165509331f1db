"""
Rate limiting configuration and setup.

Uses slowapi to enforce a default per-client limit on every route
(applied by SlowAPIMiddleware). Protects against resource abuse.
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings
from app.shared.errors.mapper import HTTP_429, RATE_LIMITED, ErrorBody

logger = logging.getLogger(__name__)


def build_limiter(enabled: bool, default_limit: str) -> Limiter:
    """Build a limiter keyed on the client address."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[default_limit],
        enabled=enabled,
    )


limiter = build_limiter(settings.rate_limit_enabled, settings.rate_limit_default)


def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Handle rate limit exceeded errors with the uniform error body.

    Kept synchronous: SlowAPIMiddleware calls the registered handler
    without awaiting it.

    Args:
        request: The incoming HTTP request.
        exc: The rate limit exceeded exception.

    Returns:
        A 429 JSON response.
    """
    logger.warning(
        "Rate limit exceeded: client=%s path=%s",
        get_remote_address(request),
        request.url.path,
    )
    body = ErrorBody(HTTP_429, RATE_LIMITED, f"Rate limit exceeded: {exc.detail}")
    return JSONResponse(
        status_code=HTTP_429, content=body.to_dict(path=request.url.path)
    )
