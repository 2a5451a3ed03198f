"""
Proposal Data Access Object (DAO).

WHAT: Database operations for the Proposal model.

WHY: The DAO pattern:
1. Separates data access from business logic
2. Provides a consistent API for proposal operations
3. Encapsulates the per-deal read the valuation aggregator depends on

HOW: Extends BaseDAO with proposal-specific queries:
- Deal- and customer-based queries
- Status-based filtering and counts
"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.models.proposal import Proposal, ProposalStatus


class ProposalDAO(BaseDAO[Proposal]):
    """
    Data Access Object for Proposal model.

    WHAT: Provides CRUD and query operations for proposals.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize ProposalDAO.

        Args:
            session: Async database session
        """
        super().__init__(Proposal, session)

    async def get_by_deal(self, deal_id: int) -> List[Proposal]:
        """
        Get every proposal linked to a deal, whatever its status.

        WHAT: Full read used by the deal valuation aggregator.

        WHY: Deal value is re-derived from scratch on every proposal
        change. Draft proposals count the same as accepted ones.

        Args:
            deal_id: Deal ID

        Returns:
            All proposals for the deal, newest first
        """
        result = await self.session.execute(
            select(Proposal)
            .where(Proposal.deal_id == deal_id)
            .order_by(Proposal.created_at.desc(), Proposal.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_customer(
        self,
        customer_id: int,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Proposal]:
        """
        Get proposals addressed to a customer, newest first.
        """
        result = await self.session.execute(
            select(Proposal)
            .where(Proposal.customer_id == customer_id)
            .order_by(Proposal.created_at.desc(), Proposal.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_recent(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[ProposalStatus] = None,
    ) -> List[Proposal]:
        """
        List proposals newest first, optionally filtered by status.
        """
        query = select(Proposal)
        if status is not None:
            query = query.where(Proposal.status == status)
        query = query.order_by(Proposal.created_at.desc(), Proposal.id.desc())

        result = await self.session.execute(query.offset(skip).limit(limit))
        return list(result.scalars().all())

    async def count_by_status(self) -> dict:
        """
        Get count of proposals by status.

        Returns:
            Dict mapping status value to count
        """
        result = await self.session.execute(
            select(Proposal.status, func.count(Proposal.id)).group_by(Proposal.status)
        )
        return {row[0].value: row[1] for row in result.all()}

    async def calculate_total_value(self, status: Optional[ProposalStatus] = None) -> Decimal:
        """
        Sum of proposal totals, optionally for one status.
        """
        query = select(func.coalesce(func.sum(Proposal.total), 0))
        if status is not None:
            query = query.where(Proposal.status == status)

        result = await self.session.execute(query)
        return Decimal(str(result.scalar_one()))

    async def unlink_deal(self, deal_id: int) -> int:
        """
        Detach all proposals from a deal that is about to be deleted.

        Returns:
            Number of proposals detached
        """
        result = await self.session.execute(
            update(Proposal)
            .where(Proposal.deal_id == deal_id)
            .values(deal_id=None)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
