"""One access-log line per request, correlated by request id."""

import logging
import time
from typing import Callable, Iterable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from plan_directory.config import logger
from plan_directory.core.security import PROBE_PATHS, get_client_ip


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status, duration and client of every request.

    Probe paths are skipped so orchestrator polling does not flood the log.
    Client errors are logged at WARNING and server errors at ERROR.
    """

    def __init__(self, app: ASGIApp, exclude_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.exclude_paths = frozenset(PROBE_PATHS if exclude_paths is None else exclude_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        started = time.perf_counter()
        request_id = getattr(request.state, "request_id", "-")
        client_ip = get_client_ip(request)

        try:
            response = await call_next(request)
        except Exception as exc:
            # Traceback is logged by ErrorSanitizationMiddleware
            logger.error(
                "%s %s failed after %.1fms: %s (client=%s, request_id=%s)",
                request.method,
                request.url.path,
                (time.perf_counter() - started) * 1000,
                type(exc).__name__,
                client_ip,
                request_id,
            )
            raise

        logger.log(
            _level_for(response.status_code),
            "%s %s -> %d in %.1fms (client=%s, request_id=%s)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            client_ip,
            request_id,
        )
        return response
