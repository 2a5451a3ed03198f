"""
Product schemas.

WHAT: Request/Response models for the product catalog.

WHY: Only subscription products carry a billing interval; a subscription
without one is billed monthly.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


Interval = Literal["monthly", "quarterly", "yearly"]


class ProductCreate(BaseModel):
    """Schema for adding a product to the catalog."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Managed hosting",
                "description": "Hosting with backups and monitoring",
                "price": 49.0,
                "is_subscription": True,
                "subscription_interval": "monthly",
            }
        },
    )

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: Decimal = Field(..., ge=0, lt=Decimal("1E10"), decimal_places=2)
    is_subscription: bool = False
    subscription_interval: Optional[Interval] = None
    is_active: bool = True

    @model_validator(mode="after")
    def interval_matches_kind(self) -> "ProductCreate":
        if not self.is_subscription:
            self.subscription_interval = None
        elif self.subscription_interval is None:
            self.subscription_interval = "monthly"
        return self


class ProductUpdate(BaseModel):
    """Schema for partial product updates."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[Decimal] = Field(default=None, ge=0, lt=Decimal("1E10"), decimal_places=2)
    is_subscription: Optional[bool] = None
    subscription_interval: Optional[Interval] = None
    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    """Product as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    is_subscription: bool
    subscription_interval: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """Paginated product list."""

    items: List[ProductResponse]
    total: int
    skip: int
    limit: int
