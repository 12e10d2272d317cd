"""Prometheus metrics definitions and helpers.

Provides the metric definitions for the relay's HTTP surface and its
upstream GraphQL calls.
"""

from typing import Callable

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    REGISTRY,
    CollectorRegistry,
)


class RelayMetrics:
    """Relay HTTP and upstream metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize relay metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.registry = registry

        # Inbound requests
        self.http_requests = Counter(
            "relay_http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        # Inbound request duration
        self.http_request_duration = Histogram(
            "relay_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=registry,
        )

        # Upstream queries by outcome (success|graphql_error|transport_error)
        self.upstream_queries = Counter(
            "relay_upstream_queries_total",
            "Total GraphQL queries sent upstream",
            ["operation", "outcome"],
            registry=registry,
        )

        # Upstream call duration
        self.upstream_query_duration = Histogram(
            "relay_upstream_query_duration_seconds",
            "Time spent waiting on the upstream GraphQL API",
            ["operation"],
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
            registry=registry,
        )


def setup_metrics(registry: CollectorRegistry = None) -> RelayMetrics:
    """Setup and return a metrics instance.

    Args:
        registry: Registry to register into; a fresh one is created if omitted

    Returns:
        RelayMetrics bound to the registry
    """
    return RelayMetrics(registry or CollectorRegistry())


def get_metrics_handler(registry: CollectorRegistry = REGISTRY) -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler
