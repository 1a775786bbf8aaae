"""
Security Utilities

Request ID tracking.
"""

import re
import secrets

from fastapi import Request

from plan_directory.core.security.constants import MAX_REQUEST_ID_LENGTH

_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return secrets.token_hex(16)


def is_valid_request_id(value: str) -> bool:
    """Inbound ids are echoed into headers and logs, so only short token-like ids pass."""
    return bool(value) and len(value) <= MAX_REQUEST_ID_LENGTH and _REQUEST_ID_PATTERN.match(value) is not None


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
