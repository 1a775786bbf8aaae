"""
Security Constants

Centralized constants for security module.
"""

# Request ID header
REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

# Paths that are probed by orchestrators and kept out of request logs
PROBE_PATHS = frozenset({"/health", "/ready"})
