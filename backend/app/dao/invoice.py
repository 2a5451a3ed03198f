"""
Invoice Data Access Object (DAO).

WHAT: Database operations for the Invoice model.

WHY: Invoice numbering is sequential per year and must be computed from
existing rows; creating an invoice from a proposal copies its amounts.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.models.base import utc_now
from app.models.invoice import Invoice, InvoiceStatus
from app.models.proposal import Proposal


class InvoiceDAO(BaseDAO[Invoice]):
    """Data Access Object for Invoice model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Invoice, session)

    async def get_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        """Find an invoice by its human-readable number (e.g., INV-2025-0001)."""
        result = await self.session.execute(
            select(Invoice).where(Invoice.invoice_number == invoice_number)
        )
        return result.scalar_one_or_none()

    async def get_by_proposal(self, proposal_id: int) -> Optional[Invoice]:
        """Find the invoice generated from a proposal, if any."""
        result = await self.session.execute(
            select(Invoice).where(Invoice.proposal_id == proposal_id).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_recent(
        self,
        skip: int = 0,
        limit: int = 100,
        customer_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> List[Invoice]:
        """List invoices newest first with optional filters."""
        query = select(Invoice)
        if customer_id is not None:
            query = query.where(Invoice.customer_id == customer_id)
        if status is not None:
            query = query.where(Invoice.status == status)
        query = query.order_by(Invoice.created_at.desc(), Invoice.id.desc())

        result = await self.session.execute(query.offset(skip).limit(limit))
        return list(result.scalars().all())

    async def get_next_invoice_number_sequence(self, year: Optional[int] = None) -> int:
        """
        Get the next sequence number for invoice numbering.

        WHAT: Count invoices with this year's prefix to determine next number.

        Returns:
            Next sequence number (starting from 1)
        """
        year = year or utc_now().year
        result = await self.session.execute(
            select(func.count(Invoice.id)).where(
                Invoice.invoice_number.like(f"INV-{year}-%")
            )
        )
        return result.scalar_one() + 1

    async def create_from_proposal(self, proposal: Proposal, due_days: int = 30) -> Invoice:
        """
        Create an invoice from an accepted proposal.

        WHAT: Generate invoice copying proposal items and amounts.

        Args:
            proposal: Accepted proposal to invoice
            due_days: Days until payment due

        Returns:
            Newly created invoice
        """
        sequence = await self.get_next_invoice_number_sequence()

        return await self.create(
            invoice_number=Invoice.generate_invoice_number(sequence),
            customer_id=proposal.customer_id,
            deal_id=proposal.deal_id,
            proposal_id=proposal.id,
            items=[dict(item) for item in proposal.items or []],
            subtotal=proposal.subtotal,
            discount_amount=proposal.discount_amount or Decimal(0),
            tax=proposal.tax_amount or Decimal(0),
            total=proposal.total,
            status=InvoiceStatus.DRAFT,
            due_date=date.today() + timedelta(days=due_days),
        )

    async def get_overdue(self) -> List[Invoice]:
        """Sent invoices whose due date has passed."""
        result = await self.session.execute(
            select(Invoice)
            .where(
                Invoice.status == InvoiceStatus.SENT,
                Invoice.due_date < date.today(),
            )
            .order_by(Invoice.due_date.asc())
        )
        return list(result.scalars().all())
