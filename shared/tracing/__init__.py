"""OpenTelemetry tracing for the web shell."""

from .otel_config import configure_tracing, instrument_app, shutdown_tracing, traced

__all__ = ["configure_tracing", "instrument_app", "shutdown_tracing", "traced"]
