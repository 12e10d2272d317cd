"""
GitHub GraphQL client.

Implements the upstream call protocol: POST ``{query, variables}`` as JSON to
the GraphQL endpoint with a bearer token, read the whole body and parse it as
a GraphQL response. Every failure to obtain a parseable response is raised as
``UpstreamTransportError``. There is no retry.
"""

import asyncio
import time
from typing import Any, Dict, Optional, Union

import aiohttp
from pydantic import SecretStr, ValidationError

from relay.src.exceptions import UpstreamTransportError
from relay.src.models.graphql import GraphQLRequest, GraphQLResponse
from shared.logging import LoggerMixin
from shared.metrics import RelayMetrics


class GitHubClient(LoggerMixin):
    """
    Async client for the GitHub GraphQL API.

    One ``aiohttp.ClientSession`` is shared across requests. It is opened by
    ``start()`` (or lazily on first use) and released by ``close()``.
    """

    def __init__(
        self,
        token: Union[SecretStr, str],
        base_url: str = "https://api.github.com/graphql",
        timeout: Optional[float] = None,
        metrics: Optional[RelayMetrics] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the client.

        Args:
            token: Bearer token for the upstream API
            base_url: GraphQL endpoint URL
            timeout: Total timeout per call in seconds, None for no timeout
            metrics: Optional metrics sink for upstream call outcomes
            session: Pre-built session (the client will not close it)
        """
        self._token = token if isinstance(token, SecretStr) else SecretStr(token)
        self.base_url = base_url
        self.timeout = timeout
        self.metrics = metrics
        self._session = session
        self._owns_session = session is None

    def __repr__(self) -> str:
        return f"GitHubClient(base_url={self.base_url!r})"

    async def start(self) -> None:
        """Open the HTTP session if it is not open yet."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
            self.logger.info(
                "github_client_started",
                base_url=self.base_url,
                timeout=self.timeout,
            )

    async def close(self) -> None:
        """Close the HTTP session if this client opened it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            self.logger.info("github_client_closed")
        self._session = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token.get_secret_value()}",
            "Content-Type": "application/json",
        }

    async def query(
        self,
        query: str,
        variables: Dict[str, Any],
        operation: str = "query",
    ) -> GraphQLResponse:
        """
        Execute one GraphQL query upstream.

        Args:
            query: GraphQL document
            variables: Variable bindings, sent verbatim
            operation: Short name used in logs and metric labels

        Returns:
            Parsed response; ``errors`` may be non-empty

        Raises:
            UpstreamTransportError: Network failure, timeout, or a body that
                is not a GraphQL JSON response
        """
        await self.start()

        payload = GraphQLRequest(query=query, variables=variables)
        start_time = time.perf_counter()

        try:
            async with self._session.post(
                self.base_url,
                data=payload.model_dump_json(),
                headers=self._headers(),
            ) as resp:
                status = resp.status
                body = await resp.read()

        except asyncio.TimeoutError as e:
            self._record(operation, "transport_error", start_time)
            self.logger.error("upstream_query_timeout", operation=operation, timeout=self.timeout)
            raise UpstreamTransportError(
                f"upstream request timed out after {self.timeout}s"
            ) from e

        except aiohttp.ClientError as e:
            self._record(operation, "transport_error", start_time)
            self.logger.error(
                "upstream_query_failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise UpstreamTransportError(str(e) or type(e).__name__) from e

        if status >= 400:
            self.logger.warning("upstream_http_status", operation=operation, status=status)

        try:
            # A bare JSON null decodes to an empty response
            if body.strip() == b"null":
                result = GraphQLResponse()
            else:
                result = GraphQLResponse.model_validate_json(body)
        except ValidationError as e:
            self._record(operation, "transport_error", start_time)
            self.logger.error(
                "upstream_response_invalid",
                operation=operation,
                status=status,
                error_count=e.error_count(),
            )
            raise UpstreamTransportError(str(e)) from e

        outcome = "graphql_error" if result.has_errors else "success"
        self._record(operation, outcome, start_time)
        self.logger.debug("upstream_query_completed", operation=operation, outcome=outcome)
        return result

    def _record(self, operation: str, outcome: str, start_time: float) -> None:
        if self.metrics is None:
            return
        self.metrics.upstream_queries.labels(operation=operation, outcome=outcome).inc()
        self.metrics.upstream_query_duration.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )
