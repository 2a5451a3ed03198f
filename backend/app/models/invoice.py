"""
Invoice model for billing.

WHAT: SQLAlchemy model representing an invoice, usually generated from an
accepted proposal.

WHY: Invoices are the financial record of a won deal:
1. Track amounts owed by the customer
2. Record payment status
3. Keep a copy of the proposal's items and totals

HOW: Amounts and items are copied from the proposal for immutability
(an invoice shouldn't change if the proposal is later edited).
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, PrimaryKeyMixin, TimestampMixin, enum_column, utc_now


class InvoiceStatus(str, Enum):
    """
    Invoice payment workflow status.

    - DRAFT: Created but not sent
    - SENT: Sent to the customer
    - PAID: Payment received
    - OVERDUE: Past due date without payment
    - CANCELLED: Voided
    """

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Invoice(PrimaryKeyMixin, TimestampMixin, Base):
    """
    Customer invoice.

    Attributes:
        invoice_number: Human-readable identifier (INV-YYYY-NNNN)
        customer_id: Billed customer
        deal_id: Deal the invoice closes (optional)
        proposal_id: Source proposal (optional, manual invoices allowed)
        items: Copied line items
        subtotal: Sum of line items
        discount_amount: Discount copied from the proposal
        tax: Tax amount
        total: Amount due
        status: Payment status
        due_date: Payment due date
        sent_at / paid_at: Workflow timestamps
    """

    __tablename__ = "invoices"

    invoice_number: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
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
    proposal_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("proposals.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    status: Mapped[InvoiceStatus] = mapped_column(
        enum_column(InvoiceStatus, "invoicestatus"),
        nullable=False,
        default=InvoiceStatus.DRAFT,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.invoice_number}, status={self.status})>"

    @property
    def is_overdue(self) -> bool:
        """Unpaid and past its due date."""
        if self.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED):
            return False
        return date.today() > self.due_date

    @classmethod
    def generate_invoice_number(cls, sequence: int, year: Optional[int] = None) -> str:
        """
        Generate a human-readable invoice number.

        HOW: Format INV-YYYY-NNNN where NNNN is the zero-padded
        sequence number within the year.
        """
        year = year or utc_now().year
        return f"INV-{year}-{sequence:04d}"
