"""
Body Size Limit Middleware

Rejects requests whose body exceeds the configured limit, whether the size is
declared up front or only known while the body streams in.
"""

from fastapi import HTTPException, status
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from plan_directory.config import logger
from plan_directory.responses import error_response

TOO_LARGE_MESSAGE = "Request body too large"


class BodySizeLimitMiddleware:
    """
    Enforces ``max_body_size`` on request bodies.

    - Declared Content-Length over the limit: 413 before the body is read
    - Chunked or undeclared bodies: bytes are counted as they are received and
      the read fails with 413 once the total passes the limit
    """

    def __init__(self, app: ASGIApp, max_body_size: int):
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                response = error_response(status.HTTP_400_BAD_REQUEST, "Invalid Content-Length header")
                await response(scope, receive, send)
                return
            if declared > self.max_body_size:
                self._log_rejection(scope, declared)
                response = error_response(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, TOO_LARGE_MESSAGE)
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    self._log_rejection(scope, received)
                    # Re-raised untouched by FastAPI's body parsing
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=TOO_LARGE_MESSAGE,
                    )
            return message

        await self.app(scope, limited_receive, send)

    def _log_rejection(self, scope: Scope, size: int) -> None:
        logger.warning(
            "Rejected %s %s: body of at least %d bytes exceeds %d",
            scope.get("method"),
            scope.get("path"),
            size,
            self.max_body_size,
        )
