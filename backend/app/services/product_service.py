"""
Product Service.

WHAT: Business logic for the product catalog, and the step that turns a
product reference on a proposal line into a priced line.

WHY: A line picked from the catalog takes the product's name, billing
kind and (unless a negotiated price is given) its price. Proposals store a
copy, so later catalog edits never reprice an existing proposal; only
lines that are sent again pick up the current catalog data.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BusinessRuleViolation, ProductNotFoundError, ValidationError
from app.dao.product import ProductDAO
from app.models.product import Product

logger = logging.getLogger(__name__)


def catalog_line(product: Product, item: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Fill a proposal line from a catalog product.

    Description and unit_price sent with the line win over the catalog;
    name and subscription settings always come from the product.
    """
    line = dict(item)
    line["product_id"] = product.id
    line["product_name"] = product.name
    if not line.get("description"):
        line["description"] = product.description or product.name
    if line.get("unit_price") is None:
        line["unit_price"] = float(product.price)
    line["is_subscription"] = product.is_subscription
    line["subscription_interval"] = (
        product.subscription_interval if product.is_subscription else None
    )
    return line


class ProductService:
    """Service for product catalog operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.product_dao = ProductDAO(session)

    async def get(self, product_id: int) -> Product:
        product = await self.product_dao.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(
                message=f"Product with id {product_id} not found",
                resource_type="Product",
                resource_id=product_id,
            )
        return product

    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        active_only: bool = False,
        search: Optional[str] = None,
    ) -> List[Product]:
        if search:
            products = await self.product_dao.search(search, limit=limit)
            if active_only:
                products = [p for p in products if p.is_active]
            return products
        return await self.product_dao.list_by_name(
            skip=skip, limit=limit, active_only=active_only
        )

    async def count(self, active_only: bool = False) -> int:
        if active_only:
            return await self.product_dao.count(is_active=True)
        return await self.product_dao.count()

    async def create(self, data: Dict[str, Any]) -> Product:
        product = await self.product_dao.create(**data)
        logger.info("Product %s created (price=%s)", product.id, product.price)
        return product

    async def update(self, product_id: int, data: Dict[str, Any]) -> Product:
        product = await self.get(product_id)
        fields = dict(data)
        subscription = fields.get("is_subscription", product.is_subscription)
        if not subscription:
            fields["subscription_interval"] = None
        elif not (fields.get("subscription_interval") or product.subscription_interval):
            fields["subscription_interval"] = "monthly"
        elif fields.get("subscription_interval") is None:
            fields.pop("subscription_interval", None)
        return await self.product_dao.update(product_id, **fields)

    async def delete(self, product_id: int) -> None:
        """Delete a product; proposals keep their copied lines."""
        await self.get(product_id)
        await self.product_dao.delete(product_id)
        logger.info("Product %s deleted", product_id)

    async def fill_lines(
        self,
        items: Iterable[Mapping[str, Any]],
        known_product_ids: Iterable[int] = (),
    ) -> List[Dict[str, Any]]:
        """
        Resolve product references on proposal lines.

        Args:
            items: Line dicts, some carrying product_id
            known_product_ids: Products already on the proposal; these may
                be inactive or deleted since and are then kept as sent

        Returns:
            Line dicts ready for pricing

        Raises:
            ProductNotFoundError: If a new line names an unknown product
            BusinessRuleViolation: If a new line names an inactive product
            ValidationError: If a line ends up without description or price
        """
        known = set(known_product_ids)
        lines = []
        for item in items:
            line = dict(item)
            product_id = line.get("product_id")
            if product_id is not None:
                product = await self.product_dao.get_by_id(product_id)
                if product is None and product_id not in known:
                    raise ProductNotFoundError(
                        message=f"Product with id {product_id} not found",
                        resource_type="Product",
                        resource_id=product_id,
                    )
                if product is not None:
                    if not product.is_active and product_id not in known:
                        raise BusinessRuleViolation(
                            message=f"Product {product.name} is no longer offered",
                            product_id=product_id,
                        )
                    line = catalog_line(product, line)

            if not line.get("description") or line.get("unit_price") is None:
                raise ValidationError(
                    message="Each line item needs a description and a unit_price",
                    product_id=product_id,
                )
            lines.append(line)
        return lines
