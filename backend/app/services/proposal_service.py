"""
Proposal Service.

WHAT: Business logic for proposals: pricing, CRUD and the status workflow.

WHY: A proposal change always has two side effects that must not be
forgotten by any caller:
1. The deal it belongs to is revalued from all of the deal's proposals
2. A note is written to the customer/deal timeline

HOW: Orchestrates ProposalDAO, the pure pricing functions in
proposal_calculator and DealValuationService. Routers only translate
schemas into calls on this class.
"""

import logging
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    BusinessRuleViolation,
    CustomerNotFoundError,
    DealNotFoundError,
    InvalidStateTransitionError,
    ProposalNotFoundError,
)
from app.dao.customer import CustomerDAO
from app.dao.deal import DealDAO
from app.dao.proposal import ProposalDAO
from app.models.base import utc_now
from app.models.proposal import Proposal, ProposalStatus
from app.services.activity_service import ActivityService
from app.services.deal_valuation import DealValuationService
from app.services.product_service import ProductService
from app.services.proposal_calculator import calculate_totals, priced_items

logger = logging.getLogger(__name__)

_OPEN_STATUSES = frozenset(
    {ProposalStatus.DRAFT, ProposalStatus.SENT, ProposalStatus.VIEWED}
)

# target status -> statuses it may be reached from
ALLOWED_TRANSITIONS: Dict[ProposalStatus, FrozenSet[ProposalStatus]] = {
    ProposalStatus.SENT: frozenset({ProposalStatus.DRAFT}),
    ProposalStatus.VIEWED: frozenset({ProposalStatus.SENT}),
    ProposalStatus.ACCEPTED: _OPEN_STATUSES,
    ProposalStatus.REJECTED: _OPEN_STATUSES,
    ProposalStatus.EXPIRED: _OPEN_STATUSES,
}

_PRICING_FIELDS = {"items", "discount_percentage", "tax_percentage"}


class ProposalService:
    """
    Service for proposal operations.

    Every mutation ends with a revaluation of the linked deal.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize ProposalService.

        Args:
            session: Async database session
        """
        self.session = session
        self.proposal_dao = ProposalDAO(session)
        self.customer_dao = CustomerDAO(session)
        self.deal_dao = DealDAO(session)
        self.valuation = DealValuationService(session)
        self.activities = ActivityService(session)
        self.products = ProductService(session)

    async def get(self, proposal_id: int) -> Proposal:
        proposal = await self.proposal_dao.get_by_id(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(
                message=f"Proposal with id {proposal_id} not found",
                resource_type="Proposal",
                resource_id=proposal_id,
            )
        return proposal

    async def list_filtered(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[ProposalStatus] = None,
        customer_id: Optional[int] = None,
        deal_id: Optional[int] = None,
    ) -> List[Proposal]:
        if deal_id is not None:
            return (await self.proposal_dao.get_by_deal(deal_id))[skip:skip + limit]
        if customer_id is not None:
            return await self.proposal_dao.get_by_customer(customer_id, skip=skip, limit=limit)
        return await self.proposal_dao.list_recent(skip=skip, limit=limit, status=status)

    async def _check_references(self, customer_id: Optional[int], deal_id: Optional[int]) -> None:
        if customer_id is not None and not await self.customer_dao.exists(id=customer_id):
            raise CustomerNotFoundError(
                message=f"Customer with id {customer_id} not found",
                resource_type="Customer",
                resource_id=customer_id,
            )
        if deal_id is not None and not await self.deal_dao.exists(id=deal_id):
            raise DealNotFoundError(
                message=f"Deal with id {deal_id} not found",
                resource_type="Deal",
                resource_id=deal_id,
            )

    async def _revalue(self, *deal_ids: Optional[int]) -> None:
        for deal_id in dict.fromkeys(deal_ids):
            if deal_id is not None:
                await self.valuation.recalculate(deal_id)

    async def create(self, data: Dict[str, Any]) -> Proposal:
        """
        Create a priced proposal in DRAFT status.

        WHAT: Fills item totals, computes subtotal/discount/tax/total and
        revalues the linked deal.

        Args:
            data: Proposal fields; items are plain dicts

        Returns:
            The created proposal

        Raises:
            CustomerNotFoundError / DealNotFoundError: If a reference is dangling
            ValidationError: If a percentage is outside 0-100
            ProductNotFoundError: If a line names an unknown product
            BusinessRuleViolation: If a line names an inactive product
        """
        fields = dict(data)
        await self._check_references(fields.get("customer_id"), fields.get("deal_id"))

        items = priced_items(await self.products.fill_lines(fields.pop("items", None) or []))
        totals = calculate_totals(
            items,
            fields.get("discount_percentage"),
            fields.get("tax_percentage"),
        )

        proposal = await self.proposal_dao.create(
            **fields,
            items=items,
            status=ProposalStatus.DRAFT,
            subtotal=totals.subtotal,
            discount_amount=totals.discount_amount,
            tax_amount=totals.tax_amount,
            total=totals.total,
        )
        logger.info("Proposal %s created (total=%s)", proposal.id, proposal.total)

        await self.activities.record_note(
            title=f"Proposal created: {proposal.title}",
            customer_id=proposal.customer_id,
            deal_id=proposal.deal_id,
        )
        await self._revalue(proposal.deal_id)
        return proposal

    async def update(self, proposal_id: int, data: Dict[str, Any]) -> Proposal:
        """
        Update a proposal and reprice it when items or rates change.

        WHY: Moving a proposal to another deal changes the value of both
        deals, so the old and the new deal are revalued.

        Args:
            proposal_id: Proposal to update
            data: Only the fields that were sent

        Raises:
            ProposalNotFoundError: If the proposal doesn't exist
            BusinessRuleViolation: If pricing changes on an answered proposal,
                or a new line names an inactive product
            ProductNotFoundError: If a new line names an unknown product
        """
        proposal = await self.get(proposal_id)
        fields = dict(data)
        old_deal_id = proposal.deal_id

        await self._check_references(fields.get("customer_id"), fields.get("deal_id"))

        if _PRICING_FIELDS & fields.keys():
            if not proposal.is_editable:
                raise BusinessRuleViolation(
                    message=f"Cannot change pricing of a {proposal.status.value} proposal",
                    proposal_id=proposal_id,
                    status=proposal.status.value,
                )
            if "items" in fields:
                known = [i.get("product_id") for i in proposal.items or [] if i.get("product_id")]
                items = await self.products.fill_lines(fields.pop("items") or [], known)
            else:
                items = proposal.items or []
            items = priced_items(items)
            discount = fields.get("discount_percentage", proposal.discount_percentage)
            tax = fields.get("tax_percentage", proposal.tax_percentage)
            totals = calculate_totals(items, discount, tax)
            fields.update(
                items=items,
                subtotal=totals.subtotal,
                discount_amount=totals.discount_amount,
                tax_amount=totals.tax_amount,
                total=totals.total,
            )

        proposal = await self.proposal_dao.update(proposal_id, **fields)
        await self.activities.record_note(
            title=f"Proposal updated: {proposal.title}",
            customer_id=proposal.customer_id,
            deal_id=proposal.deal_id,
        )
        await self._revalue(old_deal_id, proposal.deal_id)
        return proposal

    async def delete(self, proposal_id: int) -> None:
        """Delete a proposal and revalue the deal it belonged to."""
        proposal = await self.get(proposal_id)
        deal_id = proposal.deal_id
        customer_id = proposal.customer_id
        title = proposal.title

        await self.proposal_dao.delete(proposal_id)
        logger.info("Proposal %s deleted", proposal_id)

        await self.activities.record_note(
            title=f"Proposal deleted: {title}",
            customer_id=customer_id,
            deal_id=deal_id,
        )
        await self._revalue(deal_id)

    async def _transition(
        self,
        proposal_id: int,
        target: ProposalStatus,
        **timestamps: datetime,
    ) -> Proposal:
        proposal = await self.get(proposal_id)
        current = proposal.status
        if current not in ALLOWED_TRANSITIONS[target]:
            raise InvalidStateTransitionError(
                message=f"Cannot move proposal from {current.value} to {target.value}",
                current_state=current.value,
                requested_state=target.value,
            )

        proposal = await self.proposal_dao.update(proposal_id, status=target, **timestamps)
        logger.info("Proposal %s: %s -> %s", proposal_id, current.value, target.value)

        await self.activities.record_note(
            title=f"Proposal {target.value}: {proposal.title}",
            customer_id=proposal.customer_id,
            deal_id=proposal.deal_id,
        )
        await self._revalue(proposal.deal_id)
        return proposal

    async def mark_sent(self, proposal_id: int) -> Proposal:
        return await self._transition(
            proposal_id, ProposalStatus.SENT, sent_at=utc_now()
        )

    async def mark_viewed(self, proposal_id: int) -> Proposal:
        """
        Record that the customer opened the proposal.

        Only a SENT proposal moves to VIEWED; in any other status this is a
        no-op so repeated opens are harmless.
        """
        proposal = await self.get(proposal_id)
        if proposal.status != ProposalStatus.SENT:
            return proposal
        return await self._transition(
            proposal_id, ProposalStatus.VIEWED, viewed_at=utc_now()
        )

    async def mark_accepted(self, proposal_id: int) -> Proposal:
        return await self._transition(
            proposal_id, ProposalStatus.ACCEPTED, responded_at=utc_now()
        )

    async def mark_rejected(self, proposal_id: int) -> Proposal:
        return await self._transition(
            proposal_id, ProposalStatus.REJECTED, responded_at=utc_now()
        )

    async def mark_expired(self, proposal_id: int) -> Proposal:
        return await self._transition(proposal_id, ProposalStatus.EXPIRED)
