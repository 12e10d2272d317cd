"""
Cross-origin middleware.

Adds the fixed CORS headers to every response and answers ``OPTIONS``
preflight requests for any path with an empty 204 before routing happens.
"""

from typing import Callable, Dict

import structlog
from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from relay.src.config import Settings

logger = structlog.get_logger(__name__)


def cors_headers(settings: Settings) -> Dict[str, str]:
    """Build the CORS header set for the given settings."""
    headers = {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Headers": ", ".join(settings.cors_allow_headers),
        "Access-Control-Allow-Methods": ", ".join(settings.cors_allow_methods),
    }
    if settings.cors_allow_credentials:
        headers["Access-Control-Allow-Credentials"] = "true"
    return headers


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Apply the relay's cross-origin policy to all requests."""

    def __init__(self, app, settings: Settings):
        """
        Initialize CORS middleware.

        Args:
            app: ASGI application
            settings: Relay settings holding the CORS values
        """
        super().__init__(app)
        self.headers = cors_headers(settings)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            logger.debug("cors_preflight", path=request.url.path)
            return Response(status_code=status.HTTP_204_NO_CONTENT, headers=self.headers)

        response = await call_next(request)
        response.headers.update(self.headers)
        return response
