"""
Deal Valuation Service.

WHAT: Re-derives a deal's value fields from every proposal linked to it.

WHY: Once proposals reference a deal, the deal's value is no longer typed
in by hand. It is the sum of the proposals' line items, split into
recurring (subscription) and one-time revenue:
- subscription_value = sum of item totals flagged is_subscription
- one_time_value = sum of the other item totals
- value = subscription_value + one_time_value

HOW: Every call re-reads all proposals for the deal (no delta tracking),
regardless of proposal status, and overwrites the three columns. The deal
row is locked (SELECT ... FOR UPDATE) before the proposals are read and
stays locked until the surrounding transaction commits. A concurrent
recalculation of the same deal waits for that commit, so it reads the
proposals as the first writer left them. If the read fails the deal is
left exactly as it was and AggregationReadError is raised.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AggregationReadError, DealNotFoundError
from app.dao.deal import DealDAO
from app.dao.proposal import ProposalDAO
from app.models.proposal import Proposal
from app.services.proposal_calculator import ZERO, item_total, round_money, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DealValues:
    """Derived value fields of a deal."""

    value: Decimal
    subscription_value: Decimal
    one_time_value: Decimal


def aggregate_proposal_values(proposals: Iterable[Proposal]) -> DealValues:
    """
    Sum line items of the given proposals into deal values.

    Items without a stored total fall back to quantity x unit_price.
    """
    subscription = ZERO
    one_time = ZERO
    for proposal in proposals:
        for item in proposal.items or []:
            if item.get("total") is not None:
                amount = to_decimal(item["total"])
            else:
                amount = item_total(item)
            if item.get("is_subscription"):
                subscription += amount
            else:
                one_time += amount

    subscription = round_money(subscription)
    one_time = round_money(one_time)
    return DealValues(
        value=subscription + one_time,
        subscription_value=subscription,
        one_time_value=one_time,
    )


class DealValuationService:
    """
    Service that keeps Deal.value in sync with its proposals.

    Invoked after proposal create, update, delete and every status change.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.deal_dao = DealDAO(session)
        self.proposal_dao = ProposalDAO(session)

    async def calculate(self, deal_id: int) -> DealValues:
        """
        Compute the deal values without writing them.

        Raises:
            AggregationReadError: If the proposals cannot be read
        """
        try:
            proposals = await self.proposal_dao.get_by_deal(deal_id)
        except SQLAlchemyError as e:
            logger.warning("Could not read proposals for deal %s: %s", deal_id, e)
            raise AggregationReadError(deal_id=deal_id) from e

        return aggregate_proposal_values(proposals)

    async def recalculate(self, deal_id: int) -> DealValues:
        """
        Recompute and persist value, subscription_value and one_time_value.

        Args:
            deal_id: Deal to recalculate

        Returns:
            The values written to the deal

        Raises:
            DealNotFoundError: If the deal doesn't exist
            AggregationReadError: If the proposals cannot be read (deal untouched)
        """
        deal = await self.deal_dao.get_for_update(deal_id)
        if deal is None:
            raise DealNotFoundError(
                message=f"Deal with id {deal_id} not found",
                resource_type="Deal",
                resource_id=deal_id,
            )

        values = await self.calculate(deal_id)
        await self.deal_dao.set_values(
            deal_id,
            value=values.value,
            subscription_value=values.subscription_value,
            one_time_value=values.one_time_value,
        )

        logger.info(
            "Deal %s revalued: value=%s subscription=%s one_time=%s",
            deal_id,
            values.value,
            values.subscription_value,
            values.one_time_value,
        )
        return values

    async def has_proposals(self, deal_id: int) -> bool:
        """Whether any proposal references the deal (value is then derived)."""
        return await self.proposal_dao.exists(deal_id=deal_id)
