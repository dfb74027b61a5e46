"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    HTTPMetrics,
    WebMetrics,
    get_http_metrics,
    get_metrics_handler,
    get_web_metrics,
)

__all__ = [
    "HTTPMetrics",
    "WebMetrics",
    "get_http_metrics",
    "get_metrics_handler",
    "get_web_metrics",
]
