"""
Customer Data Access Object (DAO).

WHAT: Database operations for the Customer model.

WHY: Customer email is the natural key used by the CSV importer (both for
duplicate detection and for resolving deal rows), and the comparison must
be case-insensitive. Keeping that query here means every caller agrees
on what "same customer" means.
"""

from typing import List, Optional
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.models.customer import Customer


class CustomerDAO(BaseDAO[Customer]):
    """Data Access Object for Customer model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Customer, session)

    async def get_by_email(self, email: str) -> Optional[Customer]:
        """
        Find a customer by email, ignoring case and surrounding whitespace.

        Args:
            email: Email address to look up

        Returns:
            The first matching customer or None
        """
        result = await self.session.execute(
            select(Customer)
            .where(func.lower(Customer.email) == email.strip().lower())
            .order_by(Customer.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """
        Check whether an email is already taken.

        Args:
            email: Email address to check
            exclude_id: Customer to ignore (the one being updated)

        Returns:
            True if another customer uses this email
        """
        query = select(Customer.id).where(
            func.lower(Customer.email) == email.strip().lower()
        )
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def list_recent(self, skip: int = 0, limit: int = 100) -> List[Customer]:
        """List customers newest first."""
        result = await self.session.execute(
            select(Customer)
            .order_by(Customer.created_at.desc(), Customer.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def search(self, term: str, limit: int = 50) -> List[Customer]:
        """
        Search customers by name, email or company (case-insensitive substring).

        Args:
            term: Search text
            limit: Maximum results

        Returns:
            Matching customers ordered by name
        """
        pattern = f"%{term.strip().lower()}%"
        result = await self.session.execute(
            select(Customer)
            .where(
                or_(
                    func.lower(Customer.name).like(pattern),
                    func.lower(Customer.email).like(pattern),
                    func.lower(Customer.company).like(pattern),
                )
            )
            .order_by(Customer.name)
            .limit(limit)
        )
        return list(result.scalars().all())
