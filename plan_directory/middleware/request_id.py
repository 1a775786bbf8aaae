"""Request id propagation for log correlation across services."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from plan_directory.config import logger
from plan_directory.core.security import REQUEST_ID_HEADER, generate_request_id, is_valid_request_id


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id, stored on ``request.state.request_id`` and
    returned in the ``X-Request-ID`` response header.

    A caller-supplied id is kept when well formed so traces from upstream
    services line up; a malformed one is replaced.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        inbound = request.headers.get(REQUEST_ID_HEADER)
        if inbound and is_valid_request_id(inbound):
            request_id = inbound
        else:
            request_id = generate_request_id()
            if inbound:
                logger.debug("Replaced malformed inbound request id on %s", request.url.path)

        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
