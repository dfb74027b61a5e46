"""
FastAPI application entry point for the MR Travels web shell.

This module provides the main FastAPI application with:
- Server-rendered pages (root layout, admin tools)
- Health and readiness endpoints
- Request/response logging with correlation IDs
- Prometheus metrics
- OpenTelemetry distributed tracing
- CORS, security headers, and rate limiting
- MongoDB client lifecycle management
- Graceful startup and shutdown
"""

import time
import uuid
import structlog
import uvicorn
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Any, Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.exceptions import HTTPException as StarletteHTTPException

from prometheus_client import CONTENT_TYPE_LATEST

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from web.src.config import FrameworkConfig, Settings, build_framework_config, get_settings
from web.src.dependencies import (
    close_mongo_client,
    create_templates,
    get_client_ip,
    get_framework_config,
    init_mongo_client,
    ping_database,
)
from web.src.models.page import HealthStatus, ReadinessResponse
from web.src.routers.pages import render_error_page, router as pages_router
from web.src.services.external_packages import check_external_packages
from shared.logging import bind_context, clear_context, configure_logging
from shared.metrics import get_http_metrics, get_metrics_handler, get_web_metrics
from shared.tracing import configure_tracing, instrument_app, shutdown_tracing

# Initialize logger
logger = structlog.get_logger(__name__)

# ============================================================================
# Lifespan Management
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - Logging and OpenTelemetry tracing setup
    - Framework configuration and external package checks
    - MongoDB client initialization
    - Graceful shutdown and resource cleanup
    """
    settings: Settings = app.state.settings

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name=settings.app_name,
        environment=settings.environment,
    )

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    # ========================================================================
    # Startup: Initialize Resources
    # ========================================================================

    try:
        if settings.tracing_enabled:
            logger.info("initializing_tracing", otlp_endpoint=settings.tracing_otlp_endpoint)
            app.state.tracer_provider = configure_tracing(
                service_name=settings.app_name,
                service_version=settings.app_version,
                otlp_endpoint=settings.tracing_otlp_endpoint,
                sampling_rate=settings.tracing_sample_rate,
            )
            logger.info("tracing_initialized")

        framework_config = build_framework_config(settings)
        logger.info(
            "framework_config_loaded",
            server_external_packages=framework_config.server_external_packages,
            image_domains=framework_config.images.domains,
            env=framework_config.masked_env(),
        )
        check_external_packages(framework_config.server_external_packages)

        if settings.mongodb_uri:
            logger.info(
                "initializing_mongo_client",
                max_pool_size=settings.mongodb_max_pool_size,
                ping_on_startup=settings.mongodb_ping_on_startup
            )
            init_mongo_client(settings, ping_on_connect=settings.mongodb_ping_on_startup)
        else:
            # Pages still render; /ready reports the database as not configured
            logger.warning("mongo_uri_not_configured")

        logger.info(
            "application_started",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment
        )

        yield

    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        raise

    # ========================================================================
    # Shutdown: Cleanup Resources
    # ========================================================================

    finally:
        logger.info("application_shutting_down")

        try:
            close_mongo_client()

            tracer_provider = getattr(app.state, "tracer_provider", None)
            if tracer_provider is not None:
                logger.info("shutting_down_tracing")
                shutdown_tracing(tracer_provider)

            logger.info("application_shutdown_complete")

        except Exception as e:
            logger.error("application_shutdown_failed", error=str(e), exc_info=True)


# ============================================================================
# Middleware
# ============================================================================


UNMATCHED_ENDPOINT = "unmatched"


def route_template(request: Request) -> str:
    """
    Metrics label for a request: the path template of the matching route.

    Paths that match no route share one label so that arbitrary URLs
    cannot create new series.
    """
    partial = None
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return route.path
        if match == Match.PARTIAL and partial is None:
            partial = route.path
    return partial or UNMATCHED_ENDPOINT


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging, metrics and correlation IDs."""

    async def dispatch(self, request: Request, call_next):
        """Process request and log details."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        clear_context()
        bind_context(correlation_id=correlation_id)

        method = request.method
        path = request.url.path
        endpoint = route_template(request)
        client_ip = await get_client_ip(request)
        metrics = get_http_metrics()

        metrics.requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_ip=client_ip
        )

        try:
            response = await call_next(request)

            duration = time.time() - start_time

            metrics.requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()

            metrics.request_duration.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration:.3f}s"
            )

            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            raise

        finally:
            metrics.requests_in_progress.labels(method=method, endpoint=endpoint).dec()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if self.settings.security_headers_enabled:
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["X-XSS-Protection"] = "1; mode=block"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

            if self.settings.security_require_https:
                response.headers["Strict-Transport-Security"] = (
                    f"max-age={self.settings.security_hsts_max_age}; includeSubDomains"
                )

        return response


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Install middleware. The last one added runs first."""
    if settings.cors_enabled:
        logger.info("configuring_cors", origins=settings.cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=settings.cors_allow_methods,
            allow_headers=settings.cors_allow_headers,
        )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    if settings.security_require_https and settings.is_production:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.security_allowed_hosts
        )

    # Rate limiting sits inside the logging middleware so 429s are logged too
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, settings=settings)

    if settings.tracing_enabled:
        instrument_app(app)


# ============================================================================
# Exception Handlers
# ============================================================================


def wants_html(request: Request, settings: Settings) -> bool:
    """Pages get the HTML error page; API paths and JSON clients get JSON."""
    if request.url.path.startswith(settings.api_prefix):
        return False
    return "text/html" in request.headers.get("accept", "")


def configure_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        logger.warning(
            "validation_error",
            path=request.url.path,
            errors=exc.errors()
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors()}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        logger.warning(
            "http_exception",
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(
            "unexpected_exception",
            path=request.url.path,
            error=str(exc),
            exc_info=True
        )
        if wants_html(request, settings):
            return render_error_page(
                request,
                request.app.state.templates,
                settings,
                exc,
                getattr(request.state, "correlation_id", None)
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ============================================================================
# Health, Readiness and Metrics Endpoints
# ============================================================================


def configure_operational_routes(app: FastAPI, settings: Settings, limiter: Limiter) -> None:

    @app.get("/health", tags=["Health"], response_class=JSONResponse)
    @limiter.exempt
    async def health_check(request: Request) -> Dict[str, Any]:
        """
        Health check endpoint.

        Returns basic health status without checking dependencies.
        Use for container health checks.

        Returns:
            Health status
        """
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment
        }

    @app.get("/ready", tags=["Health"], response_class=JSONResponse)
    @limiter.exempt
    async def readiness_check(
        request: Request,
        config: FrameworkConfig = Depends(get_framework_config)
    ) -> JSONResponse:
        """
        Readiness check endpoint.

        Checks if application is ready to serve requests by verifying:
        - MongoDB is configured and answers a ping
        - Declared server packages are importable

        Returns:
            Readiness status with component health
        """
        checks: Dict[str, HealthStatus] = {}

        if not config.env.get("MONGODB_URI"):
            checks["database"] = HealthStatus.NOT_CONFIGURED
        elif await ping_database():
            checks["database"] = HealthStatus.HEALTHY
        else:
            logger.error("database_health_check_failed")
            checks["database"] = HealthStatus.UNHEALTHY

        get_web_metrics().database_up.set(1 if checks["database"] == HealthStatus.HEALTHY else 0)

        packages = check_external_packages(config.server_external_packages)

        all_healthy = (
            all(check == HealthStatus.HEALTHY for check in checks.values())
            and all(packages.values())
        )

        body = ReadinessResponse(
            status="ready" if all_healthy else "not_ready",
            service=settings.app_name,
            version=settings.app_version,
            checks=checks,
            external_packages=packages,
        )

        return JSONResponse(
            status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body.model_dump(mode="json")
        )

    if settings.metrics_enabled:
        metrics_handler = get_metrics_handler()

        @app.get("/metrics", tags=["Monitoring"], response_class=PlainTextResponse)
        @limiter.exempt
        async def metrics(request: Request) -> Response:
            """
            Prometheus metrics endpoint.

            Exposes application metrics in Prometheus format for scraping.
            """
            return Response(
                content=metrics_handler(),
                media_type=CONTENT_TYPE_LATEST
            )


# ============================================================================
# FastAPI Application
# ============================================================================


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to cached settings)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Web shell for the MR Travels bike and scooter rental system. "
            "Serves the admin tools page and operational endpoints."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.templates = create_templates(settings)

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )
    app.state.limiter = limiter

    if settings.rate_limit_enabled:
        logger.info(
            "initializing_rate_limiter",
            requests=settings.rate_limit_requests,
            window=settings.rate_limit_window
        )

    configure_middleware(app, settings)
    configure_exception_handlers(app, settings)
    configure_operational_routes(app, settings, limiter)

    app.include_router(pages_router)

    return app


app = create_app()

# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    """
    Run the application with Uvicorn for development.

    In production, run uvicorn or gunicorn with uvicorn workers against
    web.src.main:app.
    """
    settings = get_settings()

    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "web.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
        use_colors=True,
    )
