"""
Contact Data Access Object (DAO).

WHAT: Database operations for contacts and their deal/activity links.

WHY: The primary flag is a per-customer rule (at most one primary contact),
so clearing it is a single statement here. Links to deals and activities
live in plain tables; the helpers keep inserts idempotent so linking
twice is harmless.
"""

from typing import Iterable, List, Optional
from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.models.activity import Activity
from app.models.contact import Contact, activity_contacts, deal_contacts
from app.models.deal import Deal


class ContactDAO(BaseDAO[Contact]):
    """Data Access Object for Contact model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Contact, session)

    async def list_ordered(self, skip: int = 0, limit: int = 100) -> List[Contact]:
        """List contacts by last name, then first name."""
        result = await self.session.execute(
            select(Contact)
            .order_by(Contact.last_name, Contact.first_name, Contact.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_by_customer(self, customer_id: int) -> List[Contact]:
        """
        Contacts of one customer, primary contact first.

        Args:
            customer_id: Customer ID

        Returns:
            Contacts ordered primary first, then by last and first name
        """
        result = await self.session.execute(
            select(Contact)
            .where(Contact.customer_id == customer_id)
            .order_by(
                Contact.is_primary.desc(),
                Contact.last_name,
                Contact.first_name,
                Contact.id,
            )
        )
        return list(result.scalars().all())

    async def get_primary(self, customer_id: int) -> Optional[Contact]:
        result = await self.session.execute(
            select(Contact)
            .where(Contact.customer_id == customer_id, Contact.is_primary.is_(True))
            .order_by(Contact.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def clear_primary(self, customer_id: int, exclude_id: Optional[int] = None) -> int:
        """
        Remove the primary flag from a customer's contacts.

        Args:
            customer_id: Customer ID
            exclude_id: Contact that keeps its flag

        Returns:
            Number of contacts changed
        """
        query = (
            update(Contact)
            .where(Contact.customer_id == customer_id, Contact.is_primary.is_(True))
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )
        if exclude_id is not None:
            query = query.where(Contact.id != exclude_id)
        result = await self.session.execute(query)
        return result.rowcount

    async def search(self, term: str, limit: int = 50) -> List[Contact]:
        """Match first/last name, email, job title or department (case-insensitive)."""
        pattern = f"%{term.strip().lower()}%"
        result = await self.session.execute(
            select(Contact)
            .where(
                or_(
                    func.lower(Contact.first_name).like(pattern),
                    func.lower(Contact.last_name).like(pattern),
                    func.lower(Contact.email).like(pattern),
                    func.lower(Contact.title).like(pattern),
                    func.lower(Contact.department).like(pattern),
                )
            )
            .order_by(Contact.last_name, Contact.first_name, Contact.id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def unlink_all(self, contact_id: int) -> None:
        """Drop every deal and activity link of a contact."""
        await self.session.execute(
            delete(deal_contacts).where(deal_contacts.c.contact_id == contact_id)
        )
        await self.session.execute(
            delete(activity_contacts).where(activity_contacts.c.contact_id == contact_id)
        )

    # Deal links

    async def get_by_deal(self, deal_id: int) -> List[Contact]:
        """Contacts involved in a deal."""
        result = await self.session.execute(
            select(Contact)
            .join(deal_contacts, deal_contacts.c.contact_id == Contact.id)
            .where(deal_contacts.c.deal_id == deal_id)
            .order_by(Contact.last_name, Contact.first_name, Contact.id)
        )
        return list(result.scalars().all())

    async def get_deals(self, contact_id: int) -> List[Deal]:
        """Deals a contact is involved in, newest first."""
        result = await self.session.execute(
            select(Deal)
            .join(deal_contacts, deal_contacts.c.deal_id == Deal.id)
            .where(deal_contacts.c.contact_id == contact_id)
            .order_by(Deal.created_at.desc(), Deal.id.desc())
        )
        return list(result.scalars().all())

    async def link_deal(self, contact_id: int, deal_id: int) -> bool:
        """
        Link a contact to a deal.

        Returns:
            False if the link already existed
        """
        existing = await self.session.execute(
            select(deal_contacts.c.deal_id).where(
                deal_contacts.c.deal_id == deal_id,
                deal_contacts.c.contact_id == contact_id,
            )
        )
        if existing.first() is not None:
            return False
        await self.session.execute(
            insert(deal_contacts).values(deal_id=deal_id, contact_id=contact_id)
        )
        return True

    async def unlink_deal(self, contact_id: int, deal_id: int) -> bool:
        result = await self.session.execute(
            delete(deal_contacts).where(
                deal_contacts.c.deal_id == deal_id,
                deal_contacts.c.contact_id == contact_id,
            )
        )
        return result.rowcount > 0

    async def set_deal_contacts(self, deal_id: int, contact_ids: Iterable[int]) -> None:
        """Replace the contacts of a deal with the given ones."""
        await self.session.execute(delete(deal_contacts).where(deal_contacts.c.deal_id == deal_id))
        for contact_id in dict.fromkeys(contact_ids):
            await self.session.execute(
                insert(deal_contacts).values(deal_id=deal_id, contact_id=contact_id)
            )

    # Activity links

    async def get_by_activity(self, activity_id: int) -> List[Contact]:
        """Contacts involved in an activity."""
        result = await self.session.execute(
            select(Contact)
            .join(activity_contacts, activity_contacts.c.contact_id == Contact.id)
            .where(activity_contacts.c.activity_id == activity_id)
            .order_by(Contact.last_name, Contact.first_name, Contact.id)
        )
        return list(result.scalars().all())

    async def get_activities(self, contact_id: int) -> List[Activity]:
        """Activities a contact took part in, newest first."""
        result = await self.session.execute(
            select(Activity)
            .join(activity_contacts, activity_contacts.c.activity_id == Activity.id)
            .where(activity_contacts.c.contact_id == contact_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
        )
        return list(result.scalars().all())

    async def link_activity(self, contact_id: int, activity_id: int) -> bool:
        existing = await self.session.execute(
            select(activity_contacts.c.activity_id).where(
                activity_contacts.c.activity_id == activity_id,
                activity_contacts.c.contact_id == contact_id,
            )
        )
        if existing.first() is not None:
            return False
        await self.session.execute(
            insert(activity_contacts).values(activity_id=activity_id, contact_id=contact_id)
        )
        return True

    async def unlink_activity(self, contact_id: int, activity_id: int) -> bool:
        result = await self.session.execute(
            delete(activity_contacts).where(
                activity_contacts.c.activity_id == activity_id,
                activity_contacts.c.contact_id == contact_id,
            )
        )
        return result.rowcount > 0

    async def set_activity_contacts(self, activity_id: int, contact_ids: Iterable[int]) -> None:
        """Replace the contacts of an activity with the given ones."""
        await self.session.execute(
            delete(activity_contacts).where(activity_contacts.c.activity_id == activity_id)
        )
        for contact_id in dict.fromkeys(contact_ids):
            await self.session.execute(
                insert(activity_contacts).values(activity_id=activity_id, contact_id=contact_id)
            )
