"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    RelayMetrics,
    setup_metrics,
    get_metrics_handler,
)

__all__ = [
    "RelayMetrics",
    "setup_metrics",
    "get_metrics_handler",
]
