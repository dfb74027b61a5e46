"""
Application configuration using Pydantic Settings.

Provides centralized configuration for:
- Site metadata (title, description, document language)
- Framework surface (image domain allowlist, external server packages)
- Environment passthrough (MONGODB_URI, MSG91_AUTH_KEY)
- MongoDB client options
- Security, CORS and rate limiting
- Logging and monitoring

All settings support environment variable overrides and .env file loading.
"""

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Environment values handed through to server-side code
PASSTHROUGH_ENV_KEYS = ("MONGODB_URI", "MSG91_AUTH_KEY")

SECRET_ENV_KEYS = frozenset({"MONGODB_URI", "MSG91_AUTH_KEY"})

CHOICES = {
    "log_level": ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
    "environment": ("development", "staging", "production"),
    "log_format": ("json", "text"),
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    prefix "MR_TRAVELS_" (e.g., MR_TRAVELS_LOG_LEVEL). The passthrough
    values are read from their bare names: MONGODB_URI and MSG91_AUTH_KEY.

    Environment variables are loaded from:
    1. System environment
    2. .env file in the current directory
    3. Default values defined below
    """

    # =========================================================================
    # Application Settings
    # =========================================================================

    app_name: str = Field(
        default="mr-travels-web",
        description="Service name used in logs, traces and health responses"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_prefix: str = Field(
        default="/api",
        description="URL prefix for JSON endpoints"
    )

    debug: bool = Field(
        default=False,
        description="Debug mode - enables verbose logging and error traces"
    )
    environment: str = Field(
        default="production",
        description="Environment: development|staging|production"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Bind host"
    )
    port: int = Field(
        default=3000,
        description="Bind port",
        gt=0,
        lt=65536
    )

    # =========================================================================
    # Site Metadata
    # =========================================================================

    site_title: str = Field(
        default="MR Travels - Bike Rental System",
        description="Document title"
    )
    site_description: str = Field(
        default="Digital bike and scooter rental management system with enhanced pricing engine",
        description="Document meta description"
    )
    html_lang: str = Field(
        default="en",
        description="Value of the lang attribute on the html element",
        min_length=2
    )
    support_email: str = Field(
        default="support@mrtravels.com",
        description="Address used by the error report link"
    )
    brand_logo_url: Optional[str] = Field(
        default=None,
        description="Header logo; absolute URLs must use an allowed image host"
    )

    # =========================================================================
    # Framework Surface
    # =========================================================================

    image_domains: List[str] = Field(
        default=["localhost"],
        description="Hosts allowed as absolute image sources"
    )
    server_external_packages: List[str] = Field(
        default=["pymongo"],
        description="Packages server-side rendering imports at runtime"
    )

    # =========================================================================
    # Environment Passthrough
    # =========================================================================

    mongodb_uri: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MONGODB_URI", "MR_TRAVELS_MONGODB_URI"),
        description="MongoDB connection string"
    )
    msg91_auth_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MSG91_AUTH_KEY", "MR_TRAVELS_MSG91_AUTH_KEY"),
        description="MSG91 SMS provider credential"
    )

    # =========================================================================
    # MongoDB Client Settings
    # =========================================================================

    mongodb_max_pool_size: int = Field(
        default=10,
        description="Maximum connections in the MongoDB pool",
        gt=0,
        le=500
    )
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000,
        description="Server selection timeout (milliseconds)",
        gt=0
    )
    mongodb_socket_timeout_ms: int = Field(
        default=45000,
        description="Socket timeout (milliseconds)",
        gt=0
    )
    mongodb_ping_on_startup: bool = Field(
        default=False,
        description="Ping MongoDB during startup and fail fast if unreachable"
    )

    # =========================================================================
    # Admin Tools
    # =========================================================================

    admin_tool: str = Field(
        default="DailyOpsComprehensiveFix",
        description="Registered tool rendered on /admin/tools"
    )
    admin_tool_bundle_url: Optional[str] = Field(
        default=None,
        description="Script URL of the externally built tool bundle"
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_enabled: bool = Field(
        default=True,
        description="Enable CORS middleware"
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS"
    )
    cors_allow_methods: List[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed HTTP methods"
    )
    cors_allow_headers: List[str] = Field(
        default=["*"],
        description="Allowed HTTP headers"
    )

    # =========================================================================
    # Rate Limiting Settings
    # =========================================================================

    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting"
    )
    rate_limit_requests: int = Field(
        default=100,
        description="Max requests per window",
        gt=0,
        le=10000
    )
    rate_limit_window: int = Field(
        default=60,
        description="Rate limit window (seconds)",
        gt=0,
        le=3600
    )

    # =========================================================================
    # Security Settings
    # =========================================================================

    security_require_https: bool = Field(
        default=False,
        description="Send HSTS and restrict trusted hosts"
    )
    security_allowed_hosts: List[str] = Field(
        default=["*"],
        description="Hosts accepted by TrustedHostMiddleware"
    )
    security_headers_enabled: bool = Field(
        default=True,
        description="Enable security headers (X-Frame-Options, etc.)"
    )
    security_hsts_max_age: int = Field(
        default=31536000,  # 1 year
        description="HSTS max age (seconds)"
    )

    # =========================================================================
    # Monitoring and Observability
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Expose Prometheus metrics"
    )
    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing"
    )
    tracing_otlp_endpoint: str = Field(
        default="http://otel-collector:4317",
        description="OTLP gRPC collector endpoint"
    )
    tracing_sample_rate: float = Field(
        default=0.1,
        description="Trace sampling rate (0.0-1.0)",
        ge=0.0,
        le=1.0
    )

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level", "environment", "log_format")
    @classmethod
    def validate_choice(cls, v: str, info: ValidationInfo) -> str:
        """Normalize case and check the value against its allowed set."""
        allowed = CHOICES[info.field_name]
        normalized = v.upper() if info.field_name == "log_level" else v.lower()
        if normalized not in allowed:
            raise ValueError(f"{info.field_name} must be one of {list(allowed)}, got: {v}")
        return normalized

    @field_validator("mongodb_uri")
    @classmethod
    def validate_mongodb_uri(cls, v: Optional[str]) -> Optional[str]:
        """Validate the connection string scheme; blank counts as unset."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("MONGODB_URI must start with mongodb:// or mongodb+srv://")
        return v

    @field_validator("image_domains")
    @classmethod
    def validate_image_domains(cls, v: List[str]) -> List[str]:
        """Normalize image hosts to lowercase and reject blanks."""
        domains = []
        for domain in v:
            normalized = domain.strip().lower()
            if not normalized:
                raise ValueError("image_domains cannot contain empty entries")
            domains.append(normalized)
        return domains

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def rate_limit(self) -> str:
        """Default slowapi limit string, e.g. "100/60 seconds"."""
        return f"{self.rate_limit_requests}/{self.rate_limit_window} seconds"

    model_config = SettingsConfigDict(
        env_prefix="MR_TRAVELS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
        populate_by_name=True,
    )


# ============================================================================
# Framework Configuration
# ============================================================================


class ImagesConfig(BaseModel):
    """Image optimization settings."""

    domains: List[str] = Field(
        default_factory=lambda: ["localhost"],
        description="Hosts allowed as absolute image sources"
    )


class FrameworkConfig(BaseModel):
    """
    Framework-level configuration derived from settings.

    Mirrors the deployable configuration surface: which packages the
    server imports at runtime, which image hosts are allowed, and which
    environment values are handed through to server code.
    """

    server_external_packages: List[str] = Field(default_factory=list)
    images: ImagesConfig = Field(default_factory=ImagesConfig)
    env: Dict[str, Optional[str]] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def masked_env(self) -> Dict[str, Optional[str]]:
        """Passthrough env with secret values replaced, for logging."""
        masked = {}
        for key, value in self.env.items():
            if value is not None and key in SECRET_ENV_KEYS:
                masked[key] = "***MASKED***"
            else:
                masked[key] = value
        return masked


def build_framework_config(settings: Settings) -> FrameworkConfig:
    """
    Build the framework configuration from settings.

    Args:
        settings: Application settings

    Returns:
        FrameworkConfig with exactly the passthrough env keys
    """
    return FrameworkConfig(
        server_external_packages=list(settings.server_external_packages),
        images=ImagesConfig(domains=list(settings.image_domains)),
        env={
            "MONGODB_URI": settings.mongodb_uri,
            "MSG91_AUTH_KEY": settings.msg91_auth_key,
        },
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Cached settings instance

    Example:
        >>> from web.src.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.site_title)
        MR Travels - Bike Rental System
    """
    return Settings()


def clear_settings_cache():
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
