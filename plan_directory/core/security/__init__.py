"""
Security helpers shared by the middleware stack.
"""

from plan_directory.core.security.constants import (
    MAX_REQUEST_ID_LENGTH,
    PROBE_PATHS,
    REQUEST_ID_HEADER,
)
from plan_directory.core.security.utils import (
    generate_request_id,
    get_client_ip,
    is_valid_request_id,
)

__all__ = [
    "MAX_REQUEST_ID_LENGTH",
    "PROBE_PATHS",
    "REQUEST_ID_HEADER",
    "generate_request_id",
    "get_client_ip",
    "is_valid_request_id",
]
