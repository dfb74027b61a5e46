"""
FastAPI dependency injection for the database client, settings and templates.

Provides injectable dependencies for:
- MongoDB client (process-wide cached pymongo client)
- Application settings and framework configuration
- Jinja2 templates with layout globals
- Request metadata (client IP, correlation ID)

All dependencies use FastAPI's dependency injection system and are designed
to be composable and testable.
"""

import structlog
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates
from pymongo import MongoClient
from pymongo.errors import ConfigurationError, PyMongoError
from pymongo.uri_parser import parse_uri
from starlette.concurrency import run_in_threadpool

from web.src.config import FrameworkConfig, Settings, build_framework_config, get_settings
from web.src.components import theme
from web.src.services.image_policy import ImageDomainPolicy
from shared.metrics import get_web_metrics
from shared.tracing import traced

logger = structlog.get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class DatabaseNotConfiguredError(RuntimeError):
    """Raised when MONGODB_URI is missing."""


class DatabaseConnectionError(RuntimeError):
    """Raised when a new MongoDB client cannot reach the server."""


# ============================================================================
# MONGODB CLIENT
# ============================================================================

_client: Optional[MongoClient] = None


def mongo_hosts(uri: str) -> List[str]:
    """
    List the "host:port" seeds of a connection string, without credentials.

    SRV URIs are resolved through DNS. Returns an empty list if the URI
    cannot be parsed.
    """
    try:
        nodelist = parse_uri(uri)["nodelist"]
    except (ConfigurationError, ValueError) as e:
        logger.warning("mongo_uri_unparseable", error=str(e))
        return []
    return [f"{host}:{port}" for host, port in nodelist]


def init_mongo_client(settings: Optional[Settings] = None, ping_on_connect: bool = False) -> MongoClient:
    """
    Initialize the process-wide MongoDB client.

    Returns the cached client when one exists. A failed ping resets the
    cache so the next call starts over.

    Args:
        settings: Application settings (defaults to cached settings)
        ping_on_connect: Ping the server before caching the client

    Returns:
        pymongo MongoClient

    Raises:
        DatabaseNotConfiguredError: If MONGODB_URI is not set
        DatabaseConnectionError: If the ping fails
    """
    global _client

    if _client is not None:
        logger.debug("mongo_client_reused")
        return _client

    settings = settings or get_settings()

    if not settings.mongodb_uri:
        logger.error("mongo_uri_missing")
        raise DatabaseNotConfiguredError(
            "Please define the MONGODB_URI environment variable"
        )

    client = MongoClient(
        settings.mongodb_uri,
        maxPoolSize=settings.mongodb_max_pool_size,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        socketTimeoutMS=settings.mongodb_socket_timeout_ms,
        retryWrites=True,
        retryReads=True,
        appname=settings.app_name,
    )

    if ping_on_connect:
        try:
            client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            logger.error("mongo_connection_failed", error=str(e))
            raise DatabaseConnectionError(f"Database connection failed: {e}") from e

    _client = client
    logger.info(
        "mongo_client_initialized",
        max_pool_size=settings.mongodb_max_pool_size,
        hosts=mongo_hosts(settings.mongodb_uri),
    )
    return _client


def get_mongo_client() -> MongoClient:
    """
    Get the initialized MongoDB client.

    Raises:
        DatabaseNotConfiguredError: If the client was never initialized
    """
    if _client is None:
        logger.error("mongo_client_not_initialized")
        raise DatabaseNotConfiguredError(
            "MongoDB client not initialized. Define MONGODB_URI and call init_mongo_client() during startup."
        )
    return _client


def close_mongo_client() -> None:
    """Close the MongoDB client and reset the cache. Safe to call twice."""
    global _client

    if _client is not None:
        _client.close()
        _client = None
        logger.info("mongo_client_closed")


@traced("mongodb.ping", {"db.system": "mongodb"})
async def ping_database() -> bool:
    """
    Ping MongoDB without raising.

    Returns:
        True if the server answered, False otherwise (including no client)
    """
    if _client is None:
        return False

    try:
        await run_in_threadpool(_client.admin.command, "ping")
        return True
    except PyMongoError as e:
        logger.warning("mongo_ping_failed", error=str(e))
        return False


# ============================================================================
# SETTINGS AND TEMPLATES
# ============================================================================


def get_settings_dependency(request: Request) -> Settings:
    """Get the settings the running application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_framework_config(
    settings: Settings = Depends(get_settings_dependency)
) -> FrameworkConfig:
    """Get the framework configuration derived from settings."""
    return build_framework_config(settings)


def create_templates(settings: Settings) -> Jinja2Templates:
    """
    Build the Jinja2 environment used by every page.

    Registers layout globals: site metadata defaults, theme tokens and the
    image_src helper bound to the configured domain allowlist.

    Args:
        settings: Application settings

    Returns:
        Configured Jinja2Templates
    """
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    metrics = get_web_metrics()
    policy = ImageDomainPolicy(
        settings.image_domains,
        on_reject=lambda host: metrics.disallowed_images.labels(host=host or "unknown").inc()
    )

    env = templates.env
    env.globals["html_lang"] = settings.html_lang
    env.globals["site_title"] = settings.site_title
    env.globals["site_description"] = settings.site_description
    env.globals["brand_logo_url"] = settings.brand_logo_url
    env.globals["theme"] = theme.THEME
    env.globals["button_class"] = theme.get_button_class
    env.globals["image_src"] = policy.ensure_allowed

    return templates


@lru_cache()
def get_templates() -> Jinja2Templates:
    """Get the cached template environment."""
    return create_templates(get_settings())


def get_templates_dependency(request: Request) -> Jinja2Templates:
    """Get the template environment of the running application."""
    return getattr(request.app.state, "templates", None) or get_templates()


# ============================================================================
# UTILITY DEPENDENCIES
# ============================================================================


async def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.

    Checks X-Forwarded-For header first (for proxies),
    then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, get the first one
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


async def get_correlation_id(request: Request) -> Optional[str]:
    """Get the correlation ID assigned by the logging middleware."""
    return getattr(request.state, "correlation_id", None) or request.headers.get("X-Correlation-ID")
