"""
Shared pytest fixtures.

Every test starts from a clean environment: no MongoDB URI, no cached
settings and no cached MongoDB client.
"""

import os

import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

# Importing web.src.main builds the module-level app from the environment
os.environ.pop("MONGODB_URI", None)
os.environ.pop("MSG91_AUTH_KEY", None)

from web.src.config import Settings, clear_settings_cache  # noqa: E402
from web.src.dependencies import close_mongo_client, get_templates  # noqa: E402
from web.src.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove passthrough env values and reset process-wide caches."""
    monkeypatch.delenv("MONGODB_URI", raising=False)
    monkeypatch.delenv("MSG91_AUTH_KEY", raising=False)
    clear_settings_cache()
    get_templates.cache_clear()

    yield

    close_mongo_client()
    clear_settings_cache()
    get_templates.cache_clear()


@pytest.fixture
def make_settings():
    """Build Settings with overrides; rate limiting off unless requested."""

    def _make(**overrides) -> Settings:
        overrides.setdefault("rate_limit_enabled", False)
        return Settings(**overrides)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def make_client(make_settings):
    """Create a TestClient for an app built from settings overrides."""

    def _make(raise_server_exceptions: bool = True, **overrides) -> TestClient:
        app = create_app(make_settings(**overrides))
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


@pytest.fixture
def span_exporter():
    """In-memory exporter for spans."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter):
    """Tracer provider exporting to ``span_exporter``; functions wrapped by traced() use it."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))

    def get_tracer(name, *args, **kwargs):
        return provider.get_tracer(name)

    with patch("shared.tracing.otel_config.trace.get_tracer", side_effect=get_tracer):
        yield provider

    provider.shutdown()
