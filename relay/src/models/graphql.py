"""
GraphQL wire models.

A request is a query string plus its variables. A response carries an opaque
``data`` value and an ordered list of errors. Only ``errors`` is ever
inspected; ``data`` is relayed untouched.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GraphQLRequest(BaseModel):
    """Body POSTed to the GraphQL endpoint."""

    query: str = Field(..., min_length=1, description="GraphQL document")
    variables: Dict[str, Any] = Field(default_factory=dict, description="Variable bindings")

    model_config = ConfigDict(frozen=True)


class GraphQLError(BaseModel):
    """
    A single GraphQL error.

    Only ``message`` is kept. Other fields GitHub sends (``type``, ``path``,
    ``locations``) are dropped so relayed errors are exactly ``{"message": ...}``.
    An error object without a message still counts as an error.
    """

    message: str = ""

    model_config = ConfigDict(extra="ignore", frozen=True)


class GraphQLResponse(BaseModel):
    """Parsed GraphQL response body."""

    data: Any = None
    errors: List[GraphQLError] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("errors", mode="before")
    @classmethod
    def null_errors_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0
