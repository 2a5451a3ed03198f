"""
Pydantic schemas for proposal endpoints.

WHAT: Request/response schemas for proposal management API.

WHY: Schemas define API contracts for proposal operations:
1. Validate line items (whole quantities, non-negative prices)
2. Keep discount and tax rates within 0-100
3. Document the API for OpenAPI/Swagger

HOW: Uses Pydantic v2 with Field constraints, a nested model for line
items, and from_attributes for SQLAlchemy integration. Totals are never
accepted from the client; ProposalService computes them.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.proposal import ProposalStatus


class ProposalItem(BaseModel):
    """
    Proposal line item schema.

    WHAT: Represents a single priced line of a proposal.

    WHY: The subscription flag decides whether the line counts as recurring
    or one-time revenue when the deal is revalued. A line may name a catalog
    product instead of spelling out description and price; ProposalService
    fills those in from the product.
    """

    product_id: Optional[int] = Field(default=None, gt=0, description="Catalog product")
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    product_name: Optional[str] = Field(default=None, max_length=255)
    quantity: int = Field(..., ge=1, description="Whole number of units")
    unit_price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Price per unit (defaults to the product price)",
    )
    is_subscription: bool = Field(default=False, description="Recurring revenue line")
    subscription_interval: Optional[Literal["monthly", "quarterly", "yearly"]] = Field(
        default=None,
        description="Billing interval of a subscription line",
    )

    @model_validator(mode="after")
    def interval_only_for_subscriptions(self) -> "ProposalItem":
        if not self.is_subscription:
            self.subscription_interval = None
        return self

    @model_validator(mode="after")
    def custom_line_is_complete(self) -> "ProposalItem":
        if self.product_id is None and (self.description is None or self.unit_price is None):
            raise ValueError("description and unit_price are required without product_id")
        return self

    def to_storage(self) -> dict:
        """JSON-safe dict for the items column."""
        data = self.model_dump()
        if self.unit_price is not None:
            data["unit_price"] = float(self.unit_price)
        return data

    class Config:
        json_schema_extra = {
            "example": {
                "description": "Hosting",
                "quantity": 12,
                "unit_price": 49.0,
                "is_subscription": True,
                "subscription_interval": "monthly",
            }
        }


class ProposalItemResponse(BaseModel):
    """Stored line item including its computed total."""

    product_id: Optional[int] = None
    description: str
    product_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total: Decimal
    is_subscription: bool = False
    subscription_interval: Optional[str] = None


class ProposalCreate(BaseModel):
    """
    Proposal creation request schema.

    WHAT: Proposals start in DRAFT status; totals are calculated.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255)
    customer_id: int = Field(..., gt=0)
    deal_id: Optional[int] = Field(default=None, gt=0, description="Deal whose value it feeds")
    items: List[ProposalItem] = Field(default_factory=list)
    discount_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    tax_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    valid_until: Optional[datetime] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=10000)
    terms: Optional[str] = Field(default=None, max_length=10000)


class ProposalUpdate(BaseModel):
    """
    Proposal update schema (all fields optional).

    WHY: Pricing fields can only change while the proposal is unanswered;
    that rule is enforced by the service.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    customer_id: Optional[int] = Field(default=None, gt=0)
    deal_id: Optional[int] = Field(default=None, gt=0)
    items: Optional[List[ProposalItem]] = Field(default=None)
    discount_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    tax_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    valid_until: Optional[datetime] = Field(default=None)
    notes: Optional[str] = Field(default=None, max_length=10000)
    terms: Optional[str] = Field(default=None, max_length=10000)


class ProposalResponse(BaseModel):
    """Proposal as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: ProposalStatus
    customer_id: int
    deal_id: Optional[int] = None
    items: List[ProposalItemResponse]
    subtotal: Decimal
    discount_percentage: Optional[Decimal] = None
    discount_amount: Decimal
    tax_percentage: Optional[Decimal] = None
    tax_amount: Decimal
    total: Decimal
    valid_until: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    is_editable: bool
    is_expired: bool
    created_at: datetime
    updated_at: datetime


class ProposalListResponse(BaseModel):
    """Paginated proposal list."""

    items: List[ProposalResponse]
    total: int
    skip: int
    limit: int


class ProposalStats(BaseModel):
    """Proposal counts per status and accepted value."""

    by_status: dict = Field(default_factory=dict)
    accepted_value: Decimal = Decimal(0)
