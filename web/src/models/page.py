"""
Page and error models.

Pydantic schemas for:
- Document metadata rendered into the root layout
- Error reports produced by the error boundary
- Health and readiness responses
"""

from typing import Dict, Optional
from enum import Enum

from pydantic import BaseModel, Field


class PageMetadata(BaseModel):
    """Document head metadata."""
    title: str = Field(
        ...,
        min_length=1,
        description="Document title"
    )
    description: str = Field(
        default="",
        description="Meta description"
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "title": "MR Travels - Bike Rental System",
                "description": "Digital bike and scooter rental management system with enhanced pricing engine"
            }
        }
    }


class ErrorType(str, Enum):
    """Categories used to pick the message shown by the error boundary."""
    NETWORK = "network"
    PRICING = "pricing"
    BOOKING = "booking"
    GENERAL = "general"


class ErrorReport(BaseModel):
    """Everything the fallback views need to describe a failure."""
    error_id: str = Field(
        ...,
        description="Short identifier quoted by users when reporting"
    )
    error_type: ErrorType = Field(
        ...,
        description="Error category"
    )
    message: str = Field(
        ...,
        description="User-facing message for the category"
    )
    icon: str = Field(
        ...,
        description="Icon for the category"
    )
    detail: Optional[str] = Field(
        None,
        description="Exception message"
    )
    traceback: Optional[str] = Field(
        None,
        description="Formatted traceback (development only)"
    )
    report_link: str = Field(
        ...,
        description="mailto: link prefilled with the error id"
    )


class HealthStatus(str, Enum):
    """Health status enum."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    NOT_CONFIGURED = "not_configured"


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str = Field(..., description="ready or not_ready")
    service: str
    version: str
    checks: Dict[str, HealthStatus]
    external_packages: Dict[str, bool] = Field(default_factory=dict)
