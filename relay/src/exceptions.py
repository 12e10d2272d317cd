"""
Relay exception types.

Route code raises these; the handlers registered in ``relay.src.main`` turn
them into JSON responses:

- ``UpstreamTransportError`` -> 500 ``{"error": message}``
- ``UpstreamGraphQLError`` -> 400 ``{"errors": [{"message": ...}, ...]}``
"""

from typing import List

from relay.src.models.graphql import GraphQLError


class RelayError(Exception):
    """Base class for relay errors."""


class UpstreamTransportError(RelayError):
    """The upstream call failed before a GraphQL response could be parsed.

    Covers connection failures, timeouts and bodies that are not a valid
    GraphQL JSON response.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message or "upstream request failed"


class UpstreamGraphQLError(RelayError):
    """The upstream executed the query but reported errors."""

    def __init__(self, errors: List[GraphQLError]):
        super().__init__("; ".join(e.message for e in errors))
        self.errors = list(errors)
