"""
Unit tests for ProductService.

WHAT: Tests for catalog maintenance and for filling proposal lines from
catalog products.

WHY: Verifies that:
1. A catalog line takes the product's name and billing kind
2. A negotiated price or description on the line wins over the catalog
3. New lines cannot use unknown or inactive products
4. Lines already on a proposal survive later catalog changes
5. Only subscription products carry a billing interval

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest
from decimal import Decimal

from app.core.exceptions import (
    BusinessRuleViolation,
    ProductNotFoundError,
    ValidationError,
)
from app.services.product_service import ProductService, catalog_line
from tests.factories import ProductFactory


class TestCatalogLine:
    """Tests for catalog_line()."""

    @pytest.mark.asyncio
    async def test_fills_from_product(self, db_session):
        product = await ProductFactory.create(
            db_session,
            name="Hosting",
            price=Decimal("49.50"),
            is_subscription=True,
            subscription_interval="yearly",
        )

        line = catalog_line(product, {"product_id": product.id, "quantity": 2})

        assert line["product_name"] == "Hosting"
        assert line["description"] == "Hosting"
        assert line["unit_price"] == 49.5
        assert line["is_subscription"] is True
        assert line["subscription_interval"] == "yearly"

    @pytest.mark.asyncio
    async def test_line_values_win(self, db_session):
        product = await ProductFactory.create(
            db_session, name="Consulting day", description="On-site consulting"
        )

        line = catalog_line(
            product,
            {
                "product_id": product.id,
                "quantity": 1,
                "description": "Discounted day",
                "unit_price": 650.0,
                "is_subscription": True,
            },
        )

        assert line["description"] == "Discounted day"
        assert line["unit_price"] == 650.0
        assert line["is_subscription"] is False
        assert line["subscription_interval"] is None

    @pytest.mark.asyncio
    async def test_description_falls_back_to_product_description(self, db_session):
        product = await ProductFactory.create(
            db_session, name="Audit", description="Security audit"
        )

        line = catalog_line(product, {"product_id": product.id, "quantity": 1})

        assert line["description"] == "Security audit"
        assert line["product_name"] == "Audit"


class TestFillLines:
    """Tests for ProductService.fill_lines()."""

    @pytest.mark.asyncio
    async def test_custom_lines_pass_through(self, db_session):
        lines = await ProductService(db_session).fill_lines(
            [{"description": "Custom work", "quantity": 3, "unit_price": 10.0}]
        )

        assert lines == [{"description": "Custom work", "quantity": 3, "unit_price": 10.0}]

    @pytest.mark.asyncio
    async def test_unknown_product(self, db_session):
        with pytest.raises(ProductNotFoundError):
            await ProductService(db_session).fill_lines([{"product_id": 999, "quantity": 1}])

    @pytest.mark.asyncio
    async def test_inactive_product_rejected_on_new_line(self, db_session):
        product = await ProductFactory.create(db_session, name="Legacy", is_active=False)

        with pytest.raises(BusinessRuleViolation) as exc_info:
            await ProductService(db_session).fill_lines(
                [{"product_id": product.id, "quantity": 1}]
            )

        assert exc_info.value.message == "Product Legacy is no longer offered"

    @pytest.mark.asyncio
    async def test_inactive_product_kept_when_already_on_proposal(self, db_session):
        product = await ProductFactory.create(
            db_session, name="Legacy", price=Decimal("30"), is_active=False
        )

        lines = await ProductService(db_session).fill_lines(
            [{"product_id": product.id, "quantity": 1}],
            known_product_ids=[product.id],
        )

        assert lines[0]["unit_price"] == 30.0

    @pytest.mark.asyncio
    async def test_deleted_product_kept_as_sent(self, db_session):
        line = {
            "product_id": 999,
            "product_name": "Gone",
            "description": "Old line",
            "quantity": 1,
            "unit_price": 12.0,
        }

        lines = await ProductService(db_session).fill_lines([line], known_product_ids=[999])

        assert lines == [line]

    @pytest.mark.asyncio
    async def test_deleted_product_without_price_rejected(self, db_session):
        with pytest.raises(ValidationError):
            await ProductService(db_session).fill_lines(
                [{"product_id": 999, "quantity": 1}], known_product_ids=[999]
            )


class TestProductCrud:
    """Tests for create(), update(), list() and delete()."""

    @pytest.mark.asyncio
    async def test_create(self, db_session):
        product = await ProductService(db_session).create(
            {"name": "Support", "price": Decimal("99.00")}
        )

        assert product.id is not None
        assert product.is_active is True

    @pytest.mark.asyncio
    async def test_update_to_subscription_defaults_to_monthly(self, db_session):
        product = await ProductFactory.create(db_session)

        updated = await ProductService(db_session).update(product.id, {"is_subscription": True})

        assert updated.subscription_interval == "monthly"

    @pytest.mark.asyncio
    async def test_update_to_one_time_drops_interval(self, db_session):
        product = await ProductFactory.create(
            db_session, is_subscription=True, subscription_interval="yearly"
        )

        updated = await ProductService(db_session).update(
            product.id, {"is_subscription": False, "subscription_interval": "quarterly"}
        )

        assert updated.subscription_interval is None

    @pytest.mark.asyncio
    async def test_update_keeps_existing_interval(self, db_session):
        product = await ProductFactory.create(
            db_session, is_subscription=True, subscription_interval="yearly"
        )

        updated = await ProductService(db_session).update(product.id, {"price": Decimal("10")})

        assert updated.subscription_interval == "yearly"

    @pytest.mark.asyncio
    async def test_list_active_with_search(self, db_session):
        await ProductFactory.create(db_session, name="Hosting basic")
        await ProductFactory.create(db_session, name="Hosting legacy", is_active=False)
        service = ProductService(db_session)

        products = await service.list(search="hosting", active_only=True)

        assert [p.name for p in products] == ["Hosting basic"]
        assert await service.count(active_only=True) == 1
        assert await service.count() == 2

    @pytest.mark.asyncio
    async def test_delete(self, db_session):
        product = await ProductFactory.create(db_session)
        service = ProductService(db_session)

        await service.delete(product.id)

        with pytest.raises(ProductNotFoundError):
            await service.get(product.id)
