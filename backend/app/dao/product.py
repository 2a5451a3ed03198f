"""
Product Data Access Object (DAO).

WHAT: Database operations for the product catalog.
"""

from typing import List
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.models.product import Product


class ProductDAO(BaseDAO[Product]):
    """Data Access Object for Product model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Product, session)

    async def list_by_name(
        self,
        skip: int = 0,
        limit: int = 100,
        active_only: bool = False,
    ) -> List[Product]:
        """
        List products alphabetically.

        Args:
            skip: Number of records to skip
            limit: Maximum records to return
            active_only: Leave out products no longer offered

        Returns:
            Products ordered by name
        """
        query = select(Product)
        if active_only:
            query = query.where(Product.is_active.is_(True))
        query = query.order_by(Product.name, Product.id).offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def search(self, term: str, limit: int = 50) -> List[Product]:
        """Match name or description (case-insensitive substring)."""
        pattern = f"%{term.strip().lower()}%"
        result = await self.session.execute(
            select(Product)
            .where(
                or_(
                    func.lower(Product.name).like(pattern),
                    func.lower(Product.description).like(pattern),
                )
            )
            .order_by(Product.name, Product.id)
            .limit(limit)
        )
        return list(result.scalars().all())
