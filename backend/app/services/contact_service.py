"""
Contact Service.

WHAT: Business logic for the people at a customer and their involvement
in deals and activities.

WHY: Two rules must hold however a contact is created or edited:
1. A customer has exactly one primary contact as soon as it has any
   contact at all (the first contact becomes primary; choosing another
   primary clears the old one; deleting the primary promotes the next)
2. A contact can only be linked to deals and activities of its own
   customer

HOW: Orchestrates ContactDAO with CustomerDAO, DealDAO and ActivityDAO
lookups. Link tables are only touched through ContactDAO.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ActivityNotFoundError,
    BusinessRuleViolation,
    ContactNotFoundError,
    CustomerNotFoundError,
    DealNotFoundError,
)
from app.dao.activity import ActivityDAO
from app.dao.contact import ContactDAO
from app.dao.customer import CustomerDAO
from app.dao.deal import DealDAO
from app.models.activity import Activity
from app.models.contact import Contact
from app.models.deal import Deal

logger = logging.getLogger(__name__)


class ContactService:
    """Service for contact operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.contact_dao = ContactDAO(session)
        self.customer_dao = CustomerDAO(session)
        self.deal_dao = DealDAO(session)
        self.activity_dao = ActivityDAO(session)

    async def get(self, contact_id: int) -> Contact:
        contact = await self.contact_dao.get_by_id(contact_id)
        if contact is None:
            raise ContactNotFoundError(
                message=f"Contact with id {contact_id} not found",
                resource_type="Contact",
                resource_id=contact_id,
            )
        return contact

    async def _check_customer(self, customer_id: int) -> None:
        if not await self.customer_dao.exists(id=customer_id):
            raise CustomerNotFoundError(
                message=f"Customer with id {customer_id} not found",
                resource_type="Customer",
                resource_id=customer_id,
            )

    async def _get_deal(self, deal_id: int) -> Deal:
        deal = await self.deal_dao.get_by_id(deal_id)
        if deal is None:
            raise DealNotFoundError(
                message=f"Deal with id {deal_id} not found",
                resource_type="Deal",
                resource_id=deal_id,
            )
        return deal

    async def _get_activity(self, activity_id: int) -> Activity:
        activity = await self.activity_dao.get_by_id(activity_id)
        if activity is None:
            raise ActivityNotFoundError(
                message=f"Activity with id {activity_id} not found",
                resource_type="Activity",
                resource_id=activity_id,
            )
        return activity

    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
    ) -> List[Contact]:
        if search:
            return await self.contact_dao.search(search, limit=limit)
        return await self.contact_dao.list_ordered(skip=skip, limit=limit)

    async def count(self) -> int:
        return await self.contact_dao.count()

    async def list_for_customer(self, customer_id: int) -> List[Contact]:
        """Contacts of a customer, primary first."""
        await self._check_customer(customer_id)
        return await self.contact_dao.get_by_customer(customer_id)

    async def create(self, data: Dict[str, Any]) -> Contact:
        """
        Add a contact to a customer.

        The customer's first contact becomes primary whatever was sent.

        Raises:
            CustomerNotFoundError: If the customer doesn't exist
        """
        fields = dict(data)
        customer_id = fields["customer_id"]
        await self._check_customer(customer_id)

        if not await self.contact_dao.exists(customer_id=customer_id):
            fields["is_primary"] = True
        contact = await self.contact_dao.create(**fields)
        if contact.is_primary:
            await self.contact_dao.clear_primary(customer_id, exclude_id=contact.id)

        logger.info("Contact %s created for customer %s", contact.id, customer_id)
        return contact

    async def update(self, contact_id: int, data: Dict[str, Any]) -> Contact:
        """
        Update a contact.

        WHY: Moving a contact to another customer drops its deal and
        activity links, which would otherwise point across customers. A
        moved contact is primary at its new customer only when asked for or
        when that customer had no contacts yet.
        """
        contact = await self.get(contact_id)
        fields = dict(data)
        old_customer_id = contact.customer_id
        new_customer_id = fields.get("customer_id") or old_customer_id
        moved = new_customer_id != old_customer_id

        if moved:
            await self._check_customer(new_customer_id)
            if not await self.contact_dao.exists(customer_id=new_customer_id):
                fields["is_primary"] = True
            else:
                fields.setdefault("is_primary", False)

        contact = await self.contact_dao.update(contact_id, **fields)
        if moved:
            await self.contact_dao.unlink_all(contact_id)
            logger.info(
                "Contact %s moved from customer %s to %s",
                contact_id,
                old_customer_id,
                new_customer_id,
            )

        if contact.is_primary:
            await self.contact_dao.clear_primary(new_customer_id, exclude_id=contact_id)
        await self._ensure_primary(new_customer_id)
        if moved:
            await self._ensure_primary(old_customer_id)
        return await self.get(contact_id)

    async def delete(self, contact_id: int) -> None:
        """Delete a contact; its deal and activity links go with it."""
        contact = await self.get(contact_id)
        customer_id = contact.customer_id

        await self.contact_dao.delete(contact_id)
        await self._ensure_primary(customer_id)
        logger.info("Contact %s deleted", contact_id)

    async def set_primary(self, contact_id: int) -> Contact:
        """Make a contact the primary contact of its customer."""
        contact = await self.get(contact_id)
        await self.contact_dao.clear_primary(contact.customer_id, exclude_id=contact_id)
        return await self.contact_dao.update(contact_id, is_primary=True)

    async def _ensure_primary(self, customer_id: int) -> None:
        remaining = await self.contact_dao.get_by_customer(customer_id)
        if remaining and not any(c.is_primary for c in remaining):
            await self.contact_dao.update(remaining[0].id, is_primary=True)

    # Deal involvement

    def _check_same_customer(
        self,
        contact: Contact,
        customer_id: Optional[int],
        target: str,
    ) -> None:
        if contact.customer_id != customer_id:
            raise BusinessRuleViolation(
                message=f"Contact {contact.id} does not belong to the {target}'s customer",
                contact_id=contact.id,
                customer_id=customer_id,
            )

    async def link_deal(self, contact_id: int, deal_id: int) -> None:
        contact = await self.get(contact_id)
        deal = await self._get_deal(deal_id)
        self._check_same_customer(contact, deal.customer_id, "deal")
        await self.contact_dao.link_deal(contact_id, deal_id)

    async def unlink_deal(self, contact_id: int, deal_id: int) -> None:
        await self.get(contact_id)
        await self._get_deal(deal_id)
        await self.contact_dao.unlink_deal(contact_id, deal_id)

    async def set_deal_contacts(self, deal_id: int, contact_ids: Iterable[int]) -> List[Contact]:
        """Replace the people involved in a deal."""
        deal = await self._get_deal(deal_id)
        contact_ids = list(dict.fromkeys(contact_ids))
        for contact_id in contact_ids:
            self._check_same_customer(await self.get(contact_id), deal.customer_id, "deal")
        await self.contact_dao.set_deal_contacts(deal_id, contact_ids)
        return await self.contact_dao.get_by_deal(deal_id)

    async def list_for_deal(self, deal_id: int) -> List[Contact]:
        await self._get_deal(deal_id)
        return await self.contact_dao.get_by_deal(deal_id)

    async def list_deals(self, contact_id: int) -> List[Deal]:
        await self.get(contact_id)
        return await self.contact_dao.get_deals(contact_id)

    # Activity involvement

    async def _activity_customer(self, activity: Activity) -> Optional[int]:
        if activity.customer_id is not None:
            return activity.customer_id
        deal = await self.deal_dao.get_by_id(activity.deal_id)
        return deal.customer_id if deal else None

    async def link_activity(self, contact_id: int, activity_id: int) -> None:
        contact = await self.get(contact_id)
        activity = await self._get_activity(activity_id)
        self._check_same_customer(contact, await self._activity_customer(activity), "activity")
        await self.contact_dao.link_activity(contact_id, activity_id)

    async def unlink_activity(self, contact_id: int, activity_id: int) -> None:
        await self.get(contact_id)
        await self._get_activity(activity_id)
        await self.contact_dao.unlink_activity(contact_id, activity_id)

    async def set_activity_contacts(
        self,
        activity_id: int,
        contact_ids: Iterable[int],
    ) -> List[Contact]:
        """Replace the people who took part in an activity."""
        activity = await self._get_activity(activity_id)
        customer_id = await self._activity_customer(activity)
        contact_ids = list(dict.fromkeys(contact_ids))
        for contact_id in contact_ids:
            self._check_same_customer(await self.get(contact_id), customer_id, "activity")
        await self.contact_dao.set_activity_contacts(activity_id, contact_ids)
        return await self.contact_dao.get_by_activity(activity_id)

    async def list_for_activity(self, activity_id: int) -> List[Contact]:
        await self._get_activity(activity_id)
        return await self.contact_dao.get_by_activity(activity_id)

    async def list_activities(self, contact_id: int) -> List[Activity]:
        await self.get(contact_id)
        return await self.contact_dao.get_activities(contact_id)
