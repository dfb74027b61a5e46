"""Prometheus metrics definitions and helpers.

Provides metric definitions for the MR Travels web shell.
"""

from functools import lru_cache
from typing import Callable

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    REGISTRY,
    CollectorRegistry,
)


class HTTPMetrics:
    """Request-level metrics recorded by the logging middleware."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize HTTP metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=registry,
        )

        self.requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method", "endpoint"],
            registry=registry,
        )


class WebMetrics:
    """Page rendering and dependency metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize web metrics.

        Args:
            registry: Prometheus registry to use
        """
        # Pages rendered, by outcome
        self.page_renders = Counter(
            "page_renders_total",
            "Total number of HTML pages rendered",
            ["page", "outcome"],
            registry=registry,
        )

        self.page_render_duration = Histogram(
            "page_render_duration_seconds",
            "Time spent rendering HTML pages",
            ["page"],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
            registry=registry,
        )

        # Tool components that fell back to the inline error view
        self.tool_render_failures = Counter(
            "admin_tool_render_failures_total",
            "Admin tool components that failed to render",
            ["tool", "error_type"],
            registry=registry,
        )

        self.database_up = Gauge(
            "database_up",
            "Result of the last MongoDB ping (1=reachable, 0=unreachable)",
            registry=registry,
        )

        self.disallowed_images = Counter(
            "image_host_rejections_total",
            "Image sources rejected by the domain allowlist",
            ["host"],
            registry=registry,
        )


@lru_cache()
def get_http_metrics() -> HTTPMetrics:
    """Process-wide HTTP metrics bound to the default registry."""
    return HTTPMetrics()


@lru_cache()
def get_web_metrics() -> WebMetrics:
    """Process-wide web metrics bound to the default registry."""
    return WebMetrics()


def get_metrics_handler(registry: CollectorRegistry = REGISTRY) -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler
