"""
Invoice Service.

WHAT: Turns accepted proposals into invoices and tracks their payment status.

WHY: An invoice is the financial record of a won deal. It copies the
proposal's items and amounts at the moment of invoicing, so later edits to
the proposal never change what the customer owes.

HOW: InvoiceDAO allocates the next INV-YYYY-NNNN number and copies the
amounts; this service enforces the workflow:

    draft -> sent -> paid
               \\-> overdue -> paid
    draft/sent/overdue -> cancelled
"""

import logging
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    BusinessRuleViolation,
    InvalidStateTransitionError,
    InvoiceNotFoundError,
    ResourceAlreadyExistsError,
)
from app.dao.invoice import InvoiceDAO
from app.models.base import utc_now
from app.models.invoice import Invoice, InvoiceStatus
from app.models.proposal import ProposalStatus
from app.services.activity_service import ActivityService
from app.services.proposal_service import ProposalService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.SENT: frozenset({InvoiceStatus.DRAFT}),
    InvoiceStatus.PAID: frozenset(
        {InvoiceStatus.DRAFT, InvoiceStatus.SENT, InvoiceStatus.OVERDUE}
    ),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.SENT}),
    InvoiceStatus.CANCELLED: frozenset(
        {InvoiceStatus.DRAFT, InvoiceStatus.SENT, InvoiceStatus.OVERDUE}
    ),
}


class InvoiceService:
    """Service for invoice operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.invoice_dao = InvoiceDAO(session)
        self.proposals = ProposalService(session)
        self.activities = ActivityService(session)

    async def get(self, invoice_id: int) -> Invoice:
        invoice = await self.invoice_dao.get_by_id(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(
                message=f"Invoice with id {invoice_id} not found",
                resource_type="Invoice",
                resource_id=invoice_id,
            )
        return invoice

    async def list_recent(
        self,
        skip: int = 0,
        limit: int = 100,
        customer_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> List[Invoice]:
        return await self.invoice_dao.list_recent(
            skip=skip, limit=limit, customer_id=customer_id, status=status
        )

    async def create_from_proposal(
        self,
        proposal_id: int,
        due_days: Optional[int] = None,
    ) -> Invoice:
        """
        Invoice an accepted proposal.

        Args:
            proposal_id: Proposal to invoice
            due_days: Days until payment is due (defaults to INVOICE_DUE_DAYS)

        Returns:
            The new DRAFT invoice

        Raises:
            ProposalNotFoundError: If the proposal doesn't exist
            BusinessRuleViolation: If the proposal is not accepted
            ResourceAlreadyExistsError: If the proposal was already invoiced
        """
        proposal = await self.proposals.get(proposal_id)
        if proposal.status != ProposalStatus.ACCEPTED:
            raise BusinessRuleViolation(
                message="Only accepted proposals can be invoiced",
                proposal_id=proposal_id,
                status=proposal.status.value,
            )

        existing = await self.invoice_dao.get_by_proposal(proposal_id)
        if existing is not None:
            raise ResourceAlreadyExistsError(
                message=f"Proposal {proposal_id} already has invoice {existing.invoice_number}",
                resource_type="Invoice",
                invoice_number=existing.invoice_number,
            )

        if due_days is None:
            due_days = settings.INVOICE_DUE_DAYS
        invoice = await self.invoice_dao.create_from_proposal(proposal, due_days=due_days)
        logger.info(
            "Invoice %s created from proposal %s (total=%s)",
            invoice.invoice_number,
            proposal_id,
            invoice.total,
        )

        await self.activities.record_note(
            title=f"Invoice {invoice.invoice_number} created",
            customer_id=invoice.customer_id,
            deal_id=invoice.deal_id,
        )
        return invoice

    async def _transition(self, invoice_id: int, target: InvoiceStatus, **fields) -> Invoice:
        invoice = await self.get(invoice_id)
        current = invoice.status
        if current not in ALLOWED_TRANSITIONS[target]:
            raise InvalidStateTransitionError(
                message=f"Cannot move invoice from {current.value} to {target.value}",
                current_state=current.value,
                requested_state=target.value,
            )

        invoice = await self.invoice_dao.update(invoice_id, status=target, **fields)
        logger.info("Invoice %s: %s -> %s", invoice.invoice_number, current.value, target.value)

        await self.activities.record_note(
            title=f"Invoice {invoice.invoice_number} {target.value}",
            customer_id=invoice.customer_id,
            deal_id=invoice.deal_id,
        )
        return invoice

    async def mark_sent(self, invoice_id: int) -> Invoice:
        return await self._transition(invoice_id, InvoiceStatus.SENT, sent_at=utc_now())

    async def mark_paid(self, invoice_id: int) -> Invoice:
        return await self._transition(invoice_id, InvoiceStatus.PAID, paid_at=utc_now())

    async def mark_overdue(self, invoice_id: int) -> Invoice:
        return await self._transition(invoice_id, InvoiceStatus.OVERDUE)

    async def cancel(self, invoice_id: int) -> Invoice:
        return await self._transition(invoice_id, InvoiceStatus.CANCELLED)

    async def update_overdue(self) -> List[Invoice]:
        """
        Flag every sent invoice whose due date has passed.

        Returns:
            The invoices moved to OVERDUE
        """
        flagged = []
        for invoice in await self.invoice_dao.get_overdue():
            flagged.append(await self.mark_overdue(invoice.id))
        if flagged:
            logger.info("%d invoice(s) flagged overdue", len(flagged))
        return flagged
