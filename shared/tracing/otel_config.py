"""OpenTelemetry tracing for the web shell.

Spans are exported over OTLP/gRPC. FastAPI requests are instrumented
automatically; ``traced`` wraps individual functions such as the MongoDB
ping and admin tool rendering.
"""

import functools
import inspect
from typing import Any, Callable, Dict, Optional, TypeVar

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

F = TypeVar("F", bound=Callable[..., Any])

# Probe and scrape endpoints are not traced. Matched against the full URL
# without the query string.
EXCLUDED_URLS = ",".join(
    rf"^https?://[^/]+/{name}$" for name in ("health", "ready", "metrics")
)


def configure_tracing(
    service_name: str,
    service_version: str = "1.0.0",
    otlp_endpoint: str = "http://otel-collector:4317",
    sampling_rate: float = 0.1,
) -> TracerProvider:
    """Install a global tracer provider exporting to an OTLP collector.

    Args:
        service_name: Name of the service (e.g., "mr-travels-web")
        service_version: Version reported on every span
        otlp_endpoint: OTLP gRPC collector endpoint
        sampling_rate: Fraction of new traces to sample (0.0 to 1.0)

    Returns:
        Configured TracerProvider
    """
    resource = Resource.create(
        {
            "service.name": service_name,
            "service.namespace": "mr-travels",
            "service.version": service_version,
        }
    )

    provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(sampling_rate)),
    )
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    )

    trace.set_tracer_provider(provider)

    return provider


def instrument_app(app: FastAPI, tracer_provider: Optional[TracerProvider] = None) -> None:
    """Create a server span for every request except probes and scrapes.

    Spans go to ``tracer_provider``, or the global provider when omitted.
    """
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        excluded_urls=EXCLUDED_URLS,
    )


def shutdown_tracing(provider: Optional[TracerProvider]) -> None:
    """Flush pending spans and stop the exporter."""
    if provider is not None:
        provider.shutdown()


def traced(span_name: str, attributes: Optional[Dict[str, Any]] = None) -> Callable[[F], F]:
    """Run the decorated function inside a span.

    Works for plain and async functions. Exceptions are recorded on the span,
    which is marked as failed, and re-raised.

    Args:
        span_name: Span name, e.g. "mongodb.ping"
        attributes: Static attributes set on every span

    Returns:
        Decorator
    """

    # The tracer is looked up per call so spans follow the current provider
    def decorator(func: F) -> F:

        def annotate(span) -> None:
            span.set_attribute("code.function", func.__qualname__)
            span.set_attribute("code.namespace", func.__module__)
            for key, value in (attributes or {}).items():
                span.set_attribute(key, value)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with trace.get_tracer(func.__module__).start_as_current_span(span_name) as span:
                    annotate(span)
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with trace.get_tracer(func.__module__).start_as_current_span(span_name) as span:
                annotate(span)
                return func(*args, **kwargs)

        return sync_wrapper  # type: ignore

    return decorator
