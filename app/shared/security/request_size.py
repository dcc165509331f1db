"""
Request body size limit middleware.

A declared Content-Length above the maximum is rejected before the body
is read. Bodies without one (chunked transfer encoding) are counted as
they stream in, and reading stops with a 413 once the limit is passed.
"""

import logging

from fastapi import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.shared.errors.mapper import HTTP_413, PAYLOAD_TOO_LARGE, ErrorBody

logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware:
    """Return 413 for bodies larger than ``max_bytes``."""

    def __init__(self, app: ASGIApp, max_bytes: int = 1_048_576) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        length = request.headers.get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            size = None
        if size is not None and size > self.max_bytes:
            logger.warning(
                "Request body too large: %d bytes on %s", size, request.url.path
            )
            body = ErrorBody(HTTP_413, PAYLOAD_TOO_LARGE, self._message())
            response = JSONResponse(
                status_code=HTTP_413, content=body.to_dict(path=request.url.path)
            )
            await response(scope, receive, send)
            return

        received = 0

        async def _limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message.get("type") == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning(
                        "Streamed request body too large: over %d bytes on %s",
                        self.max_bytes,
                        request.url.path,
                    )
                    raise HTTPException(status_code=HTTP_413, detail=self._message())
            return message

        await self.app(scope, _limited_receive, send)

    def _message(self) -> str:
        return f"Request body exceeds the {self.max_bytes} byte limit."
