"""
Middleware stack for the plan directory service.

Provides:
- Request ID injection
- Body size limit
- Security headers
- Request/response logging
- Error sanitization
"""

from plan_directory.middleware.body_limit import BodySizeLimitMiddleware
from plan_directory.middleware.error_sanitization import ErrorSanitizationMiddleware
from plan_directory.middleware.logging import RequestLoggingMiddleware
from plan_directory.middleware.request_id import RequestIDMiddleware
from plan_directory.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "BodySizeLimitMiddleware",
    "ErrorSanitizationMiddleware",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
