"""
Activity Service.

WHAT: Business logic for sales activities.

WHY: The service layer:
1. Validates that linked customers and deals exist
2. Provides one place to record system notes (proposal sent, invoice
   created, ...) so the customer timeline tells the whole story

HOW: Orchestrates ActivityDAO with CustomerDAO/DealDAO lookups.
"""

from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ActivityNotFoundError,
    CustomerNotFoundError,
    DealNotFoundError,
    ValidationError,
)
from app.dao.activity import ActivityDAO
from app.dao.customer import CustomerDAO
from app.dao.deal import DealDAO
from app.models.activity import Activity, ActivityType


class ActivityService:
    """
    Service for activity operations.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize ActivityService.

        Args:
            session: Async database session
        """
        self.session = session
        self.activity_dao = ActivityDAO(session)
        self.customer_dao = CustomerDAO(session)
        self.deal_dao = DealDAO(session)

    async def _check_links(self, customer_id: Optional[int], deal_id: Optional[int]) -> None:
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

    async def get(self, activity_id: int) -> Activity:
        activity = await self.activity_dao.get_by_id(activity_id)
        if activity is None:
            raise ActivityNotFoundError(
                message=f"Activity with id {activity_id} not found",
                resource_type="Activity",
                resource_id=activity_id,
            )
        return activity

    async def create(self, **fields: Any) -> Activity:
        """
        Log a new activity.

        Raises:
            ValidationError: If neither customer nor deal is given
            CustomerNotFoundError / DealNotFoundError: If a link is dangling
        """
        customer_id = fields.get("customer_id")
        deal_id = fields.get("deal_id")
        if customer_id is None and deal_id is None:
            raise ValidationError(message="An activity must reference a customer or a deal")
        await self._check_links(customer_id, deal_id)
        return await self.activity_dao.create(**fields)

    async def update(self, activity_id: int, fields: Dict[str, Any]) -> Activity:
        await self.get(activity_id)
        await self._check_links(fields.get("customer_id"), fields.get("deal_id"))
        return await self.activity_dao.update(activity_id, **fields)

    async def delete(self, activity_id: int) -> None:
        await self.get(activity_id)
        await self.activity_dao.delete(activity_id)

    async def mark_complete(self, activity_id: int) -> Activity:
        await self.get(activity_id)
        return await self.activity_dao.mark_complete(activity_id)

    async def list_for_customer(self, customer_id: int) -> List[Activity]:
        await self._check_links(customer_id, None)
        return await self.activity_dao.get_by_customer(customer_id)

    async def list_for_deal(self, deal_id: int) -> List[Activity]:
        await self._check_links(None, deal_id)
        return await self.activity_dao.get_by_deal(deal_id)

    async def open_items(self, limit: int = 100) -> List[Activity]:
        return await self.activity_dao.get_open_items(limit=limit)

    async def record_note(
        self,
        title: str,
        customer_id: Optional[int] = None,
        deal_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Activity:
        """
        Record a completed system note on a customer and/or deal.

        WHAT: Convenience method used by other services.
        """
        return await self.activity_dao.create(
            type=ActivityType.NOTE,
            title=title,
            description=description,
            customer_id=customer_id,
            deal_id=deal_id,
            completed=True,
            due_date=None,
        )
