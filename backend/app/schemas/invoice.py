"""
Invoice schemas for API request/response validation.

WHAT: Pydantic schemas for invoice data.

WHY: Invoices are created from accepted proposals only, so the create
request carries nothing but the proposal and an optional payment term.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.invoice import InvoiceStatus


class InvoiceFromProposal(BaseModel):
    """
    Schema for invoicing an accepted proposal.
    """

    proposal_id: int = Field(..., gt=0, description="Accepted proposal to invoice")
    due_days: Optional[int] = Field(
        default=None,
        ge=0,
        le=365,
        description="Days until payment is due (server default if omitted)",
    )


class InvoiceResponse(BaseModel):
    """Invoice as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    customer_id: int
    deal_id: Optional[int] = None
    proposal_id: Optional[int] = None
    items: List[Dict[str, Any]]
    subtotal: Decimal
    discount_amount: Decimal
    tax: Decimal
    total: Decimal
    status: InvoiceStatus
    due_date: Optional[date] = None
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    is_overdue: bool
    created_at: datetime
    updated_at: datetime


class InvoiceListResponse(BaseModel):
    """Paginated invoice list."""

    items: List[InvoiceResponse]
    total: int
    skip: int
    limit: int
