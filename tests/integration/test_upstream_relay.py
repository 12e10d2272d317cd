"""
Integration tests: relay app + real aiohttp client + fake GitHub server.

The application is driven over ASGI with httpx while its GitHubClient talks
HTTP to a local aiohttp server that plays the GitHub GraphQL API.
"""

import httpx
import pytest
import pytest_asyncio

from relay.src.main import create_app

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def relay(settings, metrics, fake_github):
    """Yields (http client, fake api) for an app wired to the fake server."""
    api, url = fake_github
    settings = settings.model_copy(update={"github_graphql_url": url})
    app = create_app(settings, metrics=metrics)
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client, api
    finally:
        await app.state.github_client.close()


class TestEndToEnd:

    @pytest.mark.asyncio
    async def test_pinned_round_trip(self, relay, settings):
        client, api = relay
        data = {"user": {"pinnedItems": {"totalCount": 1, "edges": [{"node": {"name": "Hello-World", "forkCount": 2}}]}}}
        api.body = {"data": data}

        response = await client.get("/api/pinned/octocat")

        assert response.status_code == 200
        assert response.json() == data
        assert len(api.requests) == 1
        sent = api.requests[0]
        assert sent["headers"]["Authorization"] == f"Bearer {settings.github_token.get_secret_value()}"
        assert sent["json"]["variables"] == {"username": "octocat"}
        assert "query PinnedRepos" in sent["json"]["query"]

    @pytest.mark.asyncio
    async def test_stats_round_trip(self, relay):
        client, api = relay
        data = {"user": {"login": "octocat", "followers": {"totalCount": 1}, "issues": {"totalCount": 0}}}
        api.body = {"data": data}

        response = await client.get("/api/stats/octocat")

        assert response.status_code == 200
        assert response.json() == data
        assert "query UserStats" in api.requests[0]["json"]["query"]

    @pytest.mark.asyncio
    async def test_unknown_user_returns_400(self, relay):
        client, api = relay
        api.body = {
            "data": {"user": None},
            "errors": [{
                "type": "NOT_FOUND",
                "path": ["user"],
                "locations": [{"line": 3, "column": 5}],
                "message": "Could not resolve to a User with the login of 'no-such-user-zz'.",
            }],
        }

        response = await client.get("/api/pinned/no-such-user-zz")

        assert response.status_code == 400
        assert response.json() == {
            "errors": [{"message": "Could not resolve to a User with the login of 'no-such-user-zz'."}]
        }

    @pytest.mark.asyncio
    async def test_error_without_message_returns_400(self, relay):
        client, api = relay
        api.body = {"data": None, "errors": [{"type": "FORBIDDEN"}]}

        response = await client.get("/api/stats/octocat")

        assert response.status_code == 400
        assert response.json() == {"errors": [{"message": ""}]}

    @pytest.mark.asyncio
    async def test_null_body_returns_null(self, relay):
        client, api = relay
        api.body = None

        response = await client.get("/api/pinned/octocat")

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_html_error_page_returns_500(self, relay):
        client, api = relay
        api.status = 502
        api.raw_body = b"<html><body><h1>502 Bad Gateway</h1></body></html>"

        response = await client.get("/api/stats/octocat")

        assert response.status_code == 500
        body = response.json()
        assert body["error"]
        assert "data" not in body

    @pytest.mark.asyncio
    async def test_preflight_never_reaches_upstream(self, relay):
        client, api = relay

        response = await client.options("/api/pinned/octocat")

        assert response.status_code == 204
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_metrics_exposed(self, relay):
        client, api = relay
        api.body = {"data": {"user": None}}

        await client.get("/api/pinned/octocat")
        response = await client.get("/metrics")

        assert response.status_code == 200
        text = response.text
        assert 'relay_upstream_queries_total{operation="pinned",outcome="success"} 1.0' in text
        assert 'endpoint="/api/pinned/{username}"' in text

    @pytest.mark.asyncio
    async def test_correlation_id_echoed(self, relay):
        client, api = relay

        response = await client.get("/", headers={"X-Correlation-ID": "req-1234"})

        assert response.headers["X-Correlation-ID"] == "req-1234"


class TestUnreachableUpstream:

    @pytest.mark.asyncio
    async def test_connection_refused_returns_500(self, settings, metrics, closed_port_url):
        settings = settings.model_copy(update={"github_graphql_url": closed_port_url})
        app = create_app(settings, metrics=metrics)
        transport = httpx.ASGITransport(app=app)

        try:
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
                response = await client.get("/api/pinned/octocat")
        finally:
            await app.state.github_client.close()

        assert response.status_code == 500
        body = response.json()
        assert set(body) == {"error"}
        assert body["error"]

    @pytest.mark.asyncio
    async def test_health_does_not_need_upstream(self, settings, metrics, closed_port_url):
        settings = settings.model_copy(update={"github_graphql_url": closed_port_url})
        app = create_app(settings, metrics=metrics)
        transport = httpx.ASGITransport(app=app)

        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
