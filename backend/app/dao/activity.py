"""
Activity Data Access Object (DAO).

WHAT: Database operations for the Activity model.

WHY: Activities are read in three shapes: a customer timeline (which also
includes activities on that customer's deals), a deal timeline, and the
list of open items across the whole CRM.
"""

from typing import List, Optional
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.models.activity import Activity
from app.models.deal import Deal


class ActivityDAO(BaseDAO[Activity]):
    """Data Access Object for Activity model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Activity, session)

    async def get_by_deal(self, deal_id: int) -> List[Activity]:
        """Activities logged on a deal, newest first."""
        result = await self.session.execute(
            select(Activity)
            .where(Activity.deal_id == deal_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_customer(
        self,
        customer_id: int,
        include_deals: bool = True,
    ) -> List[Activity]:
        """
        Activities for a customer, newest first.

        Args:
            customer_id: Customer ID
            include_deals: Also include activities on the customer's deals

        Returns:
            Matching activities
        """
        condition = Activity.customer_id == customer_id
        if include_deals:
            deal_ids = select(Deal.id).where(Deal.customer_id == customer_id)
            condition = or_(condition, Activity.deal_id.in_(deal_ids))

        result = await self.session.execute(
            select(Activity)
            .where(condition)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
        )
        return list(result.scalars().all())

    async def get_open_items(self, limit: int = 100) -> List[Activity]:
        """
        Incomplete activities, soonest due first, undated last.
        """
        result = await self.session.execute(
            select(Activity)
            .where(Activity.completed.is_(False))
            .order_by(
                Activity.due_date.is_(None),
                Activity.due_date.asc(),
                Activity.id.asc(),
            )
            .limit(limit)
        )
        return list(result.scalars().all())

    async def mark_complete(self, activity_id: int) -> Optional[Activity]:
        """Mark an activity as completed."""
        return await self.update(activity_id, completed=True)
