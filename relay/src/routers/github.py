"""
GitHub profile endpoints.

Each endpoint binds the path ``username`` into a fixed GraphQL query, calls
upstream once and returns the upstream ``data`` verbatim. GraphQL errors
become 400 responses and transport failures 500 responses through the
exception handlers in ``relay.src.main``.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from relay.src.dependencies import get_github_client
from relay.src.exceptions import UpstreamGraphQLError
from relay.src.queries import PINNED_REPOS_QUERY, USER_STATS_QUERY
from relay.src.services.github_client import GitHubClient

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["GitHub"])


async def relay_query(
    client: GitHubClient,
    operation: str,
    query: str,
    username: str,
) -> Any:
    """
    Run a fixed query for ``username`` and return the upstream ``data``.

    Raises:
        UpstreamTransportError: Propagated from the client
        UpstreamGraphQLError: Upstream reported one or more errors
    """
    result = await client.query(query, {"username": username}, operation=operation)

    if result.has_errors:
        logger.warning(
            "upstream_graphql_errors",
            operation=operation,
            username=username,
            error_count=len(result.errors),
        )
        raise UpstreamGraphQLError(result.errors)

    return result.data


@router.get("/pinned/{username}")
async def get_pinned_repositories(
    username: str,
    client: GitHubClient = Depends(get_github_client),
) -> Any:
    """Up to six repositories pinned on the user's profile."""
    return await relay_query(client, "pinned", PINNED_REPOS_QUERY, username)


@router.get("/stats/{username}")
async def get_user_stats(
    username: str,
    client: GitHubClient = Depends(get_github_client),
) -> Any:
    """Profile fields, repository, contribution and activity totals for the user."""
    return await relay_query(client, "stats", USER_STATS_QUERY, username)
