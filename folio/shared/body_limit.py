"""
Request body size cap.

A declared Content-Length over the limit is refused before the app runs.
Bodies without one (chunked uploads) are counted as they are received and
the read fails with 413 once the running total passes the limit.
"""

from typing import Any, Final

from fastapi import FastAPI, HTTPException, status
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from folio.shared.errors import error_response

MAX_BODY_SIZE = 10 * 1024 * 1024  # 10 MB

BODY_TOO_LARGE = "Request body too large"


class BodyLimitMiddleware:
    def __init__(self, app: ASGIApp, max_bytes: int = MAX_BODY_SIZE):
        self.app: Final[ASGIApp] = app
        self.max_bytes: Final[int] = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> Any:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                response = error_response("Invalid Content-Length header", status.HTTP_400_BAD_REQUEST)
                return await response(scope, receive, send)
            if declared > self.max_bytes:
                response = error_response(BODY_TOO_LARGE, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)
                return await response(scope, receive, send)

        received = 0

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # Surfaces through the app's HTTPException handler
                    raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=BODY_TOO_LARGE)
            return message

        return await self.app(scope, counting_receive, send)


def setup_body_limit(app: FastAPI, max_bytes: int = MAX_BODY_SIZE) -> None:
    """Cap request bodies at max_bytes, declared or streamed."""
    app.add_middleware(BodyLimitMiddleware, max_bytes=max_bytes)
