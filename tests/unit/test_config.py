"""
Unit tests for application settings and framework configuration.

Tests cover:
- Default site metadata and framework surface
- Environment passthrough from bare variable names
- Prefixed overrides and validators
- Framework configuration and secret masking
- Settings cache
"""

import pytest
from pydantic import ValidationError

from web.src.config import (
    PASSTHROUGH_ENV_KEYS,
    FrameworkConfig,
    Settings,
    build_framework_config,
    clear_settings_cache,
    get_settings,
)


# ============================================================================
# DEFAULTS
# ============================================================================


class TestSettingsDefaults:
    """Test default values."""

    def test_site_metadata_defaults(self):
        """Test document metadata defaults."""
        settings = Settings()

        assert settings.site_title == "MR Travels - Bike Rental System"
        assert settings.site_description == (
            "Digital bike and scooter rental management system with enhanced pricing engine"
        )
        assert settings.html_lang == "en"

    def test_framework_surface_defaults(self):
        """Test image domains and external packages defaults."""
        settings = Settings()

        assert settings.image_domains == ["localhost"]
        assert settings.server_external_packages == ["pymongo"]

    def test_mongodb_client_defaults(self):
        """Test MongoDB client options defaults."""
        settings = Settings()

        assert settings.mongodb_uri is None
        assert settings.mongodb_max_pool_size == 10
        assert settings.mongodb_server_selection_timeout_ms == 5000
        assert settings.mongodb_socket_timeout_ms == 45000

    def test_rate_limit_string(self):
        """Test slowapi limit string."""
        settings = Settings()

        assert settings.rate_limit == "100/60 seconds"

    def test_admin_tool_default(self):
        """Test the admin tools page renders DailyOpsComprehensiveFix by default."""
        assert Settings().admin_tool == "DailyOpsComprehensiveFix"


# ============================================================================
# ENVIRONMENT
# ============================================================================


class TestEnvironmentPassthrough:
    """Test passthrough values come from bare environment names."""

    def test_mongodb_uri_from_bare_env(self, monkeypatch):
        """Test MONGODB_URI is read without the prefix."""
        monkeypatch.setenv("MONGODB_URI", "mongodb://db.internal:27017/mrtravels")

        assert Settings().mongodb_uri == "mongodb://db.internal:27017/mrtravels"

    def test_msg91_auth_key_from_bare_env(self, monkeypatch):
        """Test MSG91_AUTH_KEY is read without the prefix."""
        monkeypatch.setenv("MSG91_AUTH_KEY", "msg91-key")

        assert Settings().msg91_auth_key == "msg91-key"

    def test_prefixed_name_also_accepted(self, monkeypatch):
        """Test the prefixed form works as a fallback."""
        monkeypatch.setenv("MR_TRAVELS_MONGODB_URI", "mongodb://localhost:27017")

        assert Settings().mongodb_uri == "mongodb://localhost:27017"

    def test_prefixed_override(self, monkeypatch):
        """Test other settings use the MR_TRAVELS_ prefix."""
        monkeypatch.setenv("MR_TRAVELS_LOG_LEVEL", "debug")
        monkeypatch.setenv("MR_TRAVELS_HTML_LANG", "hi")

        settings = Settings()

        assert settings.log_level == "DEBUG"
        assert settings.html_lang == "hi"

    def test_list_from_json_env(self, monkeypatch):
        """Test list settings parse JSON from the environment."""
        monkeypatch.setenv("MR_TRAVELS_IMAGE_DOMAINS", '["localhost", "CDN.mrtravels.com"]')

        assert Settings().image_domains == ["localhost", "cdn.mrtravels.com"]


# ============================================================================
# VALIDATORS
# ============================================================================


class TestSettingsValidators:
    """Test field validators."""

    def test_invalid_log_level(self):
        """Test unknown log level is rejected."""
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    def test_invalid_environment(self):
        """Test unknown environment is rejected."""
        with pytest.raises(ValidationError):
            Settings(environment="qa")

    def test_environment_normalized(self):
        """Test environment is lowercased."""
        settings = Settings(environment="Development")

        assert settings.environment == "development"
        assert settings.is_development
        assert not settings.is_production

    def test_invalid_log_format(self):
        """Test unknown log format is rejected."""
        with pytest.raises(ValidationError):
            Settings(log_format="xml")

    def test_mongodb_uri_scheme(self):
        """Test connection strings must use a MongoDB scheme."""
        with pytest.raises(ValidationError):
            Settings(mongodb_uri="postgresql://localhost/db")

    def test_mongodb_srv_scheme_accepted(self):
        """Test SRV connection strings are accepted."""
        settings = Settings(mongodb_uri="mongodb+srv://cluster0.example.net/mrtravels")

        assert settings.mongodb_uri.startswith("mongodb+srv://")

    def test_blank_mongodb_uri_is_unset(self):
        """Test a blank URI counts as not configured."""
        assert Settings(mongodb_uri="   ").mongodb_uri is None

    def test_image_domains_normalized(self):
        """Test image domains are stripped and lowercased."""
        settings = Settings(image_domains=[" LocalHost ", "Images.Example.com"])

        assert settings.image_domains == ["localhost", "images.example.com"]

    def test_image_domains_reject_blank(self):
        """Test empty image domain entries are rejected."""
        with pytest.raises(ValidationError):
            Settings(image_domains=["localhost", " "])


# ============================================================================
# FRAMEWORK CONFIGURATION
# ============================================================================


class TestFrameworkConfig:
    """Test framework configuration derived from settings."""

    def test_env_contains_exactly_passthrough_keys(self):
        """Test env passthrough exposes only the two keys."""
        config = build_framework_config(Settings())

        assert set(config.env) == set(PASSTHROUGH_ENV_KEYS)
        assert set(config.env) == {"MONGODB_URI", "MSG91_AUTH_KEY"}

    def test_env_values_flow_from_environment(self, monkeypatch):
        """Test values set in the environment reach the framework config."""
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/mrtravels")
        monkeypatch.setenv("MSG91_AUTH_KEY", "secret-key")

        config = build_framework_config(Settings())

        assert config.env["MONGODB_URI"] == "mongodb://localhost:27017/mrtravels"
        assert config.env["MSG91_AUTH_KEY"] == "secret-key"

    def test_unset_values_are_none(self):
        """Test unset passthrough values stay None."""
        config = build_framework_config(Settings())

        assert config.env == {"MONGODB_URI": None, "MSG91_AUTH_KEY": None}

    def test_images_and_packages(self):
        """Test image domains and external packages are carried over."""
        config = build_framework_config(
            Settings(image_domains=["localhost", "cdn.example.com"])
        )

        assert config.images.domains == ["localhost", "cdn.example.com"]
        assert config.server_external_packages == ["pymongo"]

    def test_masked_env_hides_secrets(self):
        """Test masked env replaces set secrets and keeps unset ones."""
        config = build_framework_config(Settings(msg91_auth_key="secret-key"))

        masked = config.masked_env()

        assert masked["MSG91_AUTH_KEY"] == "***MASKED***"
        assert masked["MONGODB_URI"] is None
        assert config.env["MSG91_AUTH_KEY"] == "secret-key"

    def test_config_is_frozen(self):
        """Test framework config cannot be modified."""
        config = build_framework_config(Settings())

        with pytest.raises(ValidationError):
            config.server_external_packages = []

    def test_empty_config(self):
        """Test framework config defaults."""
        config = FrameworkConfig()

        assert config.server_external_packages == []
        assert config.images.domains == ["localhost"]
        assert config.env == {}


# ============================================================================
# CACHE
# ============================================================================


class TestSettingsCache:
    """Test settings caching."""

    def test_get_settings_is_cached(self):
        """Test the same instance is returned."""
        assert get_settings() is get_settings()

    def test_clear_settings_cache_reloads(self, monkeypatch):
        """Test clearing the cache picks up new environment values."""
        first = get_settings()
        monkeypatch.setenv("MR_TRAVELS_SITE_TITLE", "MR Travels Staging")

        assert get_settings().site_title == first.site_title

        clear_settings_cache()

        assert get_settings().site_title == "MR Travels Staging"
