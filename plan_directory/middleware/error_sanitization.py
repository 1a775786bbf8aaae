"""
Error Sanitization Middleware

Turns unhandled exceptions into the generic failure envelope.
"""

from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from plan_directory.config import logger


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Catches anything the route handlers did not.

    The full error is logged server-side; the caller only ever sees
    ``{"success": false, "error": "Internal server error"}``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.exception("Unhandled exception in request %s: %s", request_id, exc)
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": "Internal server error"},
            )
