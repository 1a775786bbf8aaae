"""
Pydantic models for request/response validation.

Request bodies use the camelCase field names of the public API.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from plan_directory.core.plans.models import (
    CamelModel,
    Number,
    PlanFeature,
    PlanInterval,
    PlanLimits,
)


# -----------------------------------------------------------------------------
# Base Models
# -----------------------------------------------------------------------------

class BaseSchema(CamelModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore",
    )


# -----------------------------------------------------------------------------
# Plan Management Schemas
# -----------------------------------------------------------------------------

class PlanCreateRequest(BaseSchema):
    """
    Request to create a new plan.

    ``name`` and ``price`` are optional here so that their absence is reported
    with the service's own message rather than a schema error.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Number] = None
    currency: Optional[str] = None
    interval: Optional[PlanInterval] = None
    features: Optional[List[PlanFeature]] = None
    limits: Optional[PlanLimits] = None
    stripe_price_id: Optional[str] = None
    stripe_product_id: Optional[str] = None
    is_popular: Optional[bool] = None
    sort_order: Optional[Number] = None


class PlanUpdateRequest(PlanCreateRequest):
    """Request to update an existing plan. Only supplied fields are written."""
    is_active: Optional[bool] = None


# -----------------------------------------------------------------------------
# Envelopes
# -----------------------------------------------------------------------------

class MessageResponse(BaseSchema):
    """Success envelope carrying a message instead of data."""
    success: bool = True
    message: str


class ErrorResponse(BaseSchema):
    """Uniform failure envelope."""
    success: bool = False
    error: str


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------

class HealthResponse(BaseSchema):
    """Liveness probe response."""
    status: str = "healthy"
    service: str
    version: str
    timestamp: datetime
    uptime: float = Field(..., description="Seconds since process start")


class ReadinessResponse(BaseSchema):
    """Readiness probe response."""
    status: str
    service: Optional[str] = None
    error: Optional[str] = None
