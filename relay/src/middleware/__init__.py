"""FastAPI middleware components.

This package contains the cross-origin policy and the request logging and
metrics middleware.
"""

from relay.src.middleware.cors import CORSHeadersMiddleware, cors_headers
from relay.src.middleware.request_logging import RequestLoggingMiddleware

__all__ = [
    "CORSHeadersMiddleware",
    "RequestLoggingMiddleware",
    "cors_headers",
]
