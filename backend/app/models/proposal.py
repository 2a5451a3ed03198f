"""
Proposal model for quotes sent to customers.

WHAT: SQLAlchemy model representing a priced quote, optionally tied to a deal.

WHY: Proposals are the source of truth for deal value:
1. Line items carry the price and the subscription flag
2. Totals are derived (discount, then tax on the discounted amount)
3. Every proposal linked to a deal contributes to that deal's value
4. Accepted proposals can be turned into invoices

HOW: Uses SQLAlchemy 2.0 with:
- Status enum for the send/view/respond workflow
- JSON for line items (JSONB on PostgreSQL, JSON on SQLite)
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any, TYPE_CHECKING

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, PrimaryKeyMixin, TimestampMixin, enum_column, utc_now

if TYPE_CHECKING:
    from app.models.customer import Customer
    from app.models.deal import Deal


class ProposalStatus(str, Enum):
    """
    Proposal workflow status.

    - DRAFT: Being edited, not yet sent
    - SENT: Sent to the customer
    - VIEWED: Customer opened it
    - ACCEPTED: Customer agreed
    - REJECTED: Customer declined
    - EXPIRED: Validity period passed
    """

    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Proposal(PrimaryKeyMixin, TimestampMixin, Base):
    """
    Customer proposal/quote.

    Attributes:
        title: Proposal title
        status: Current workflow status
        customer_id: Customer the proposal is addressed to
        deal_id: Optional deal whose value this proposal feeds
        items: JSON array of line items
        subtotal: Sum of item totals
        discount_percentage: Optional discount (0-100)
        discount_amount: subtotal * discount_percentage / 100
        tax_percentage: Optional tax rate (0-100)
        tax_amount: (subtotal - discount_amount) * tax_percentage / 100
        total: subtotal - discount_amount + tax_amount
        valid_until: Expiration date
        sent_at / viewed_at / responded_at: Workflow timestamps
        notes: Internal notes
        terms: Terms and conditions
    """

    __tablename__ = "proposals"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[ProposalStatus] = mapped_column(
        enum_column(ProposalStatus, "proposalstatus"),
        nullable=False,
        default=ProposalStatus.DRAFT,
    )

    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    deal_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("deals.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Format: [{"description": str, "product_name": str | None, "quantity": int,
    #           "unit_price": float, "total": float, "is_subscription": bool,
    #           "subscription_interval": str | None}]
    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    discount_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True, default=0
    )
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    tax_percentage: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True, default=0
    )
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    valid_until: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    viewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    terms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    customer: Mapped["Customer"] = relationship("Customer", back_populates="proposals")
    deal: Mapped[Optional["Deal"]] = relationship("Deal", back_populates="proposals")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Proposal(id={self.id}, title={self.title}, status={self.status})>"

    @property
    def is_editable(self) -> bool:
        """Only proposals that have not been answered can change price."""
        return self.status in (ProposalStatus.DRAFT, ProposalStatus.SENT, ProposalStatus.VIEWED)

    @property
    def is_expired(self) -> bool:
        """
        Check if proposal has expired.

        Returns:
            True if valid_until has passed
        """
        if not self.valid_until:
            return False
        return utc_now() > self.valid_until
