"""Structured logging for the web shell (structlog)."""

from .structured_logger import (
    bind_context,
    clear_context,
    configure_logging,
    redact_connection_strings,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "redact_connection_strings",
]
