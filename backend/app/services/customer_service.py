"""
Customer Service.

WHAT: Business logic for customer records.

WHY: Email is the natural key customers are matched on (the deal importer
resolves customerEmail against it), so it must stay unique ignoring case
no matter how the customer is created or edited.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import CustomerNotFoundError, ResourceAlreadyExistsError
from app.dao.customer import CustomerDAO
from app.models.customer import Customer

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for customer operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.customer_dao = CustomerDAO(session)

    async def get(self, customer_id: int) -> Customer:
        customer = await self.customer_dao.get_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(
                message=f"Customer with id {customer_id} not found",
                resource_type="Customer",
                resource_id=customer_id,
            )
        return customer

    async def list(self, skip: int = 0, limit: int = 100, search: str = None) -> List[Customer]:
        if search:
            return await self.customer_dao.search(search, limit=limit)
        return await self.customer_dao.list_recent(skip=skip, limit=limit)

    async def count(self) -> int:
        return await self.customer_dao.count()

    async def _check_email(self, email: str, exclude_id: int = None) -> None:
        if await self.customer_dao.email_exists(email, exclude_id=exclude_id):
            raise ResourceAlreadyExistsError(
                message=f"Customer with email {email} already exists",
                resource_type="Customer",
                email=email,
            )

    async def create(self, data: Dict[str, Any]) -> Customer:
        """
        Create a customer.

        Raises:
            ResourceAlreadyExistsError: If the email is taken (any letter case)
        """
        await self._check_email(data["email"])
        customer = await self.customer_dao.create(**data)
        logger.info("Customer %s created", customer.id)
        return customer

    async def update(self, customer_id: int, data: Dict[str, Any]) -> Customer:
        await self.get(customer_id)
        if data.get("email"):
            await self._check_email(data["email"], exclude_id=customer_id)
        return await self.customer_dao.update(customer_id, **data)

    async def delete(self, customer_id: int) -> None:
        """Delete a customer together with their deals, proposals and activities."""
        await self.get(customer_id)
        await self.customer_dao.delete(customer_id)
        logger.info("Customer %s deleted", customer_id)
