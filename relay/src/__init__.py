"""GitHub GraphQL relay.

FastAPI service that forwards two fixed GraphQL queries to the GitHub API
with a server-side bearer token and republishes the JSON result to browser
clients.
"""

__version__ = "0.1.0"
