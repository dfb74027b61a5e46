"""Pydantic models for pages, error reports and health responses."""

from web.src.models.page import (
    ErrorReport,
    ErrorType,
    HealthStatus,
    PageMetadata,
    ReadinessResponse,
)

__all__ = [
    "ErrorReport",
    "ErrorType",
    "HealthStatus",
    "PageMetadata",
    "ReadinessResponse",
]
