"""Service layer for the relay."""

from relay.src.services.github_client import GitHubClient

__all__ = ["GitHubClient"]
