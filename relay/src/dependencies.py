"""
FastAPI dependency injection for the relay.

The upstream client is created once by ``create_app()`` and stored on
``app.state``; this dependency hands it to route handlers so tests can swap
it with ``app.dependency_overrides``.
"""

from fastapi import Request

from relay.src.services.github_client import GitHubClient


def get_github_client(request: Request) -> GitHubClient:
    """Shared upstream GraphQL client."""
    return request.app.state.github_client
