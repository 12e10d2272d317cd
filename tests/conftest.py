"""Shared fixtures for relay tests."""

import asyncio
import socket
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from prometheus_client import CollectorRegistry

from relay.src.config import Settings, clear_settings_cache
from relay.src.exceptions import UpstreamTransportError
from relay.src.main import create_app
from relay.src.models.graphql import GraphQLResponse
from shared.logging import clear_context
from shared.metrics import RelayMetrics


TEST_TOKEN = "ghp_test_token_0123456789"


# ============================================================================
# TEST DOUBLES
# ============================================================================


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient that records every call."""

    def __init__(self, response: Optional[Dict[str, Any]] = None, error: Optional[str] = None):
        self.response = response if response is not None else {"data": None}
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def start(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def query(self, query: str, variables: Dict[str, Any], operation: str = "query") -> GraphQLResponse:
        self.calls.append({"query": query, "variables": variables, "operation": operation})
        if self.error is not None:
            raise UpstreamTransportError(self.error)
        return GraphQLResponse.model_validate(self.response)


class FakeGitHubAPI:
    """Programmable GraphQL endpoint served by a real aiohttp server."""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.status = 200
        self.body: Any = {"data": None}
        self.raw_body: Optional[bytes] = None
        self.delay: float = 0.0

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append({
            "headers": dict(request.headers),
            "json": await request.json(),
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raw_body is not None:
            return web.Response(status=self.status, body=self.raw_body, content_type="text/html")
        return web.json_response(self.body, status=self.status)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep a developer's real token and .env file out of the tests."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("RELAY_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    clear_context()
    yield
    clear_settings_cache()
    clear_context()


@pytest.fixture
def settings() -> Settings:
    """Settings with a test token and an unroutable upstream."""
    return Settings(
        github_token=TEST_TOKEN,
        github_graphql_url="http://127.0.0.1:9/graphql",
        upstream_timeout_seconds=5,
        _env_file=None,
    )


@pytest.fixture
def metrics() -> RelayMetrics:
    return RelayMetrics(CollectorRegistry())


@pytest.fixture
def fake_client() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest_asyncio.fixture
async def api_client(settings, fake_client, metrics):
    """HTTP client bound to an app whose upstream is FakeGitHubClient."""
    app = create_app(settings, github_client=fake_client, metrics=metrics)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def fake_github():
    """Running fake GitHub GraphQL server; yields (api, url)."""
    api = FakeGitHubAPI()
    app = web.Application()
    app.router.add_post("/graphql", api.handle)
    server = TestServer(app)
    await server.start_server()
    try:
        yield api, str(server.make_url("/graphql"))
    finally:
        await server.close()


@pytest.fixture
def closed_port_url() -> str:
    """URL on a local port with nothing listening."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/graphql"
