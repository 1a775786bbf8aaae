"""
Plan Models

Type-safe models for plan definitions, features and usage limits.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Number = Union[int, float]

DEFAULT_CURRENCY = "USD"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Models exposed over HTTP in camelCase and populated by field name internally."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PlanInterval(str, Enum):
    """Billing interval enumeration."""
    MONTHLY = "monthly"
    YEARLY = "yearly"
    LIFETIME = "lifetime"


class PlanFeature(CamelModel):
    """A single feature line shown on a plan."""

    name: Optional[str] = None
    included: Optional[bool] = None
    limit: Optional[Number] = None
    description: Optional[str] = None


class PlanLimits(CamelModel):
    """Usage limits of a plan. Every limit is defaulted independently."""

    franchises: int = 1
    forms: int = 5
    submissions: int = 100
    staff: int = 5
    storage: int = Field(default=1024, description="Storage quota in MB")
    api_calls: int = 1000


class Plan(CamelModel):
    """Represents a subscription plan with pricing, features and limits."""

    id: Optional[str] = Field(None, description="Document id assigned by the store")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Number
    currency: str = DEFAULT_CURRENCY
    interval: PlanInterval = PlanInterval.MONTHLY
    features: List[PlanFeature] = Field(default_factory=list)
    limits: PlanLimits = Field(default_factory=PlanLimits)
    stripe_price_id: Optional[str] = None
    stripe_product_id: Optional[str] = None
    is_active: bool = True
    is_popular: bool = False
    sort_order: Number = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Blank currency falls back to the default."""
        v = v.strip() if v else ""
        return v or DEFAULT_CURRENCY

    @property
    def sort_key(self) -> tuple:
        return (self.sort_order, self.price)

    def to_firestore_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dictionary. The id lives on the document reference."""
        return {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "currency": self.currency,
            "interval": self.interval.value,
            "features": [feature.model_dump() for feature in self.features],
            "limits": self.limits.model_dump(),
            "stripe_price_id": self.stripe_price_id,
            "stripe_product_id": self.stripe_product_id,
            "is_active": self.is_active,
            "is_popular": self.is_popular,
            "sort_order": self.sort_order,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_firestore_dict(cls, doc_id: str, data: Dict[str, Any]) -> "Plan":
        """Create Plan from a Firestore document."""
        return cls(
            id=doc_id,
            name=data.get("name", ""),
            description=data.get("description"),
            price=data.get("price", 0),
            currency=data.get("currency") or DEFAULT_CURRENCY,
            interval=PlanInterval(data.get("interval") or PlanInterval.MONTHLY.value),
            features=data.get("features") or [],
            limits=data.get("limits") or {},
            stripe_price_id=data.get("stripe_price_id"),
            stripe_product_id=data.get("stripe_product_id"),
            is_active=data.get("is_active", True),
            is_popular=data.get("is_popular", False),
            sort_order=data.get("sort_order", 0),
            created_at=_as_datetime(data.get("created_at")),
            updated_at=_as_datetime(data.get("updated_at")),
        )

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class PlanFeatureSet(CamelModel):
    """Projection of a plan onto its features and limits."""

    features: List[PlanFeature] = Field(default_factory=list)
    limits: PlanLimits = Field(default_factory=PlanLimits)

    @classmethod
    def from_firestore_dict(cls, data: Dict[str, Any]) -> "PlanFeatureSet":
        return cls(
            features=data.get("features") or [],
            limits=data.get("limits") or {},
        )

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def _as_datetime(value: Any) -> datetime:
    # Firestore hands back DatetimeWithNanoseconds, a datetime subclass
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if value is not None and hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    if value is not None and hasattr(value, "seconds"):
        return datetime.fromtimestamp(value.seconds, tz=timezone.utc)
    return utcnow()
