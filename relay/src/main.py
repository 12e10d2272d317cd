"""
FastAPI application entry point for the GitHub GraphQL relay.

This module provides:
- The ``create_app()`` factory wiring settings, middleware and routers
- Exception handlers mapping upstream failures to JSON error bodies
- The liveness probe and Prometheus metrics endpoint
- ``main()``, which validates configuration and starts uvicorn
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from relay.src.config import Settings, get_settings
from relay.src.exceptions import UpstreamGraphQLError, UpstreamTransportError
from relay.src.middleware import CORSHeadersMiddleware, RequestLoggingMiddleware, cors_headers
from relay.src.routers import github
from relay.src.services.github_client import GitHubClient
from shared.logging import configure_logging
from shared.metrics import RelayMetrics, get_metrics_handler, setup_metrics

logger = structlog.get_logger(__name__)


# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the upstream session at startup and close it at shutdown."""
    settings: Settings = app.state.settings
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        upstream=settings.github_graphql_url,
    )

    await app.state.github_client.start()
    try:
        yield
    finally:
        logger.info("application_shutting_down")
        await app.state.github_client.close()
        logger.info("application_shutdown_complete")


# ============================================================================
# Exception Handlers
# ============================================================================

def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Map relay and HTTP exceptions to JSON responses."""

    @app.exception_handler(UpstreamTransportError)
    async def upstream_transport_handler(request: Request, exc: UpstreamTransportError):
        logger.error(
            "upstream_transport_error",
            path=request.url.path,
            error=exc.message,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": exc.message}
        )

    @app.exception_handler(UpstreamGraphQLError)
    async def upstream_graphql_handler(request: Request, exc: UpstreamGraphQLError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": [e.model_dump() for e in exc.errors]}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "http_exception",
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # Runs outside the middleware stack, so CORS headers are set here
    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unexpected_exception",
            path=request.url.path,
            error=str(exc),
            exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
            headers=cors_headers(settings),
        )


# ============================================================================
# FastAPI Application
# ============================================================================

def create_app(
    settings: Optional[Settings] = None,
    github_client: Optional[GitHubClient] = None,
    metrics: Optional[RelayMetrics] = None,
) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Relay settings; loaded from the environment if omitted
        github_client: Upstream client; built from settings if omitted
        metrics: Metrics sink; a private registry is used if omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    metrics = metrics or setup_metrics()

    if github_client is None:
        github_client = GitHubClient(
            token=settings.github_token,
            base_url=settings.github_graphql_url,
            timeout=settings.upstream_timeout,
            metrics=metrics,
        )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Relays fixed GitHub GraphQL queries for browser clients "
            "using a server-side token."
        ),
        lifespan=lifespan,
        debug=settings.is_development,
    )
    app.state.settings = settings
    app.state.github_client = github_client
    app.state.metrics = metrics

    # Last added runs first: logging wraps CORS, CORS runs before routing
    app.add_middleware(CORSHeadersMiddleware, settings=settings)
    app.add_middleware(RequestLoggingMiddleware, metrics=metrics)

    register_exception_handlers(app, settings)

    @app.get("/", tags=["Health"])
    async def health_check() -> Dict[str, str]:
        """Liveness probe. Never calls upstream."""
        return {"status": "ok"}

    if settings.metrics_enabled:
        metrics_handler = get_metrics_handler(metrics.registry)

        @app.get(settings.metrics_endpoint, tags=["Monitoring"], include_in_schema=False)
        async def prometheus_metrics() -> Response:
            """Prometheus metrics in text exposition format."""
            return Response(content=metrics_handler(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(github.router)

    return app


# ============================================================================
# Application Entry Point
# ============================================================================

def load_settings() -> Settings:
    """
    Load settings or terminate the process.

    Configuration errors are printed to stderr and the process exits with
    status 1 before any socket is bound.
    """
    try:
        return get_settings()
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            if field.lower() == "github_token":
                print("GITHUB_TOKEN environment variable is required", file=sys.stderr)
            else:
                print(f"Invalid configuration for {field}: {error['msg']}", file=sys.stderr)
        sys.exit(1)


def main() -> None:
    """Validate configuration, then serve the relay with uvicorn."""
    settings = load_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name="github-graphql-relay",
        environment=settings.environment,
    )

    if not Path(".env").is_file():
        logger.info("env_file_not_found", path=str(Path(".env").resolve()))

    app = create_app(settings)

    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
    )

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
