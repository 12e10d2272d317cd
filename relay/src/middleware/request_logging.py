"""Request logging and metrics middleware."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.logging import bind_context, unbind_context
from shared.metrics import RelayMetrics

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging, metrics, and correlation IDs."""

    def __init__(self, app, metrics: RelayMetrics):
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log details."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        bind_context(correlation_id=correlation_id)
        start_time = time.time()

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_ip=client_ip,
        )

        try:
            response = await call_next(request)
            duration = time.time() - start_time
            endpoint = self._endpoint_label(request)

            self.metrics.http_requests.labels(
                method=method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()
            self.metrics.http_request_duration.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration:.3f}s",
            )

            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            raise

        finally:
            unbind_context("correlation_id")

    @staticmethod
    def _endpoint_label(request: Request) -> str:
        """Route template for metric labels, so usernames don't become labels."""
        route = request.scope.get("route")
        if route is not None and hasattr(route, "path"):
            return route.path
        return "unmatched"
