"""
Contract tests for health, readiness, metrics and cross-cutting middleware.

Tests verify:
- /health and /ready response schemas and status codes
- Prometheus exposition at /metrics
- Security headers and correlation IDs
- Error response shapes and rate limiting
"""

import uuid

import pytest
from unittest.mock import AsyncMock, patch

from web.src.models.page import ReadinessResponse

MONGODB_URI = "mongodb://localhost:27017/mrtravels"


@pytest.fixture
def ping_ok():
    with patch("web.src.main.ping_database", new=AsyncMock(return_value=True)) as mock_ping:
        yield mock_ping


@pytest.fixture
def ping_failed():
    with patch("web.src.main.ping_database", new=AsyncMock(return_value=False)) as mock_ping:
        yield mock_ping


# ============================================================================
# HEALTH AND READINESS
# ============================================================================


class TestHealthEndpoint:
    """Contract tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "service": "mr-travels-web",
            "version": "1.0.0",
            "environment": "production",
        }


class TestReadinessEndpoint:
    """Contract tests for GET /ready."""

    def test_not_configured(self, client):
        """Test readiness fails when MONGODB_URI is missing."""
        response = client.get("/ready")

        assert response.status_code == 503
        body = ReadinessResponse(**response.json())
        assert body.status == "not_ready"
        assert body.checks["database"] == "not_configured"

    def test_ready(self, make_client, ping_ok):
        """Test readiness succeeds when the ping and packages succeed."""
        response = make_client(mongodb_uri=MONGODB_URI).get("/ready")

        assert response.status_code == 200
        body = ReadinessResponse(**response.json())
        assert body.status == "ready"
        assert body.checks["database"] == "healthy"
        assert body.external_packages == {"pymongo": True}
        ping_ok.assert_awaited_once()

    def test_database_unreachable(self, make_client, ping_failed):
        """Test readiness fails when the ping fails."""
        response = make_client(mongodb_uri=MONGODB_URI).get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["database"] == "unhealthy"

    def test_missing_external_package(self, make_client, ping_ok):
        """Test readiness fails when a declared server package cannot be imported."""
        client = make_client(
            mongodb_uri=MONGODB_URI,
            server_external_packages=["pymongo", "mr_travels_missing_pkg"],
        )

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["external_packages"] == {
            "pymongo": True,
            "mr_travels_missing_pkg": False,
        }

    def test_database_gauge(self, make_client, ping_ok):
        """Test the database_up gauge follows the last check."""
        client = make_client(mongodb_uri=MONGODB_URI)
        client.get("/ready")

        assert "database_up 1.0" in client.get("/metrics").text


# ============================================================================
# METRICS
# ============================================================================


class TestMetricsEndpoint:
    """Contract tests for GET /metrics."""

    def test_prometheus_format(self, client):
        client.get("/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in response.text
        assert 'endpoint="/health"' in response.text

    def test_route_template_label(self, client):
        """Test HTTP metrics are labelled by route, not raw path."""
        client.get("/admin/tools?tab=fleet")

        text = client.get("/metrics").text

        assert 'http_requests_total{method="GET",endpoint="/admin/tools",status="200"}' in text
        assert "tab=fleet" not in text

    def test_unknown_paths_share_one_series(self, client):
        """Test unknown paths cannot grow the label set."""
        for i in range(20):
            assert client.get(f"/no-such-page-{i}").status_code == 404

        lines = [
            line for line in client.get("/metrics").text.splitlines()
            if line.startswith("http_requests_total{") and 'status="404"' in line
        ]

        assert "/no-such-page" not in "\n".join(lines)
        get_lines = [line for line in lines if 'method="GET"' in line]
        assert len(get_lines) == 1
        assert 'endpoint="unmatched"' in get_lines[0]

    def test_disabled(self, make_client):
        """Test the endpoint is absent when metrics are disabled."""
        response = make_client(metrics_enabled=False).get("/metrics")

        assert response.status_code == 404


# ============================================================================
# MIDDLEWARE
# ============================================================================


class TestSecurityHeaders:
    """Contract tests for security headers."""

    def test_default_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "Strict-Transport-Security" not in response.headers

    def test_hsts_when_https_required(self, make_client):
        client = make_client(security_require_https=True, security_hsts_max_age=600)

        response = client.get("/health")

        assert response.headers["Strict-Transport-Security"] == "max-age=600; includeSubDomains"

    def test_headers_disabled(self, make_client):
        response = make_client(security_headers_enabled=False).get("/health")

        assert "X-Frame-Options" not in response.headers


class TestCorrelationId:
    """Contract tests for X-Correlation-ID."""

    def test_echoes_header(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "booking-123"})

        assert response.headers["X-Correlation-ID"] == "booking-123"

    def test_generates_id(self, client):
        response = client.get("/admin/tools")

        uuid.UUID(response.headers["X-Correlation-ID"])


class TestErrorResponses:
    """Contract tests for JSON error shapes."""

    def test_not_found(self, client):
        response = client.get("/bookings")

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}

    def test_method_not_allowed(self, client):
        response = client.post("/health")

        assert response.status_code == 405
        assert "detail" in response.json()


class TestRateLimiting:
    """Contract tests for the default rate limit."""

    def test_limit_exceeded(self, make_client):
        """Test requests over the limit are rejected."""
        client = make_client(rate_limit_enabled=True, rate_limit_requests=2, rate_limit_window=60)

        statuses = [client.get("/admin/tools").status_code for _ in range(3)]

        assert statuses == [200, 200, 429]

    def test_health_is_exempt(self, make_client):
        """Test operational endpoints are not rate limited."""
        client = make_client(rate_limit_enabled=True, rate_limit_requests=1, rate_limit_window=60)

        statuses = [client.get("/health").status_code for _ in range(3)]

        assert statuses == [200, 200, 200]

    def test_disabled(self, make_client):
        client = make_client(rate_limit_enabled=False, rate_limit_requests=1)

        statuses = [client.get("/admin/tools").status_code for _ in range(3)]

        assert statuses == [200, 200, 200]
