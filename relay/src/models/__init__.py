"""Pydantic models for the relay."""

from relay.src.models.graphql import GraphQLError, GraphQLRequest, GraphQLResponse

__all__ = ["GraphQLError", "GraphQLRequest", "GraphQLResponse"]
