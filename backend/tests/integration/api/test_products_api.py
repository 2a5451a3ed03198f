"""
Integration tests for product API.

WHAT: Tests for the product catalog endpoints and for proposal lines that
reference a product.

HOW: Uses pytest-asyncio with AsyncClient for HTTP testing.
"""

import pytest
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import DealFactory, ProductFactory


class TestProductCrud:
    """Integration tests for product endpoints."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, client: AsyncClient):
        response = await client.post(
            "/api/products",
            json={"name": "Managed hosting", "price": 49, "is_subscription": True},
        )

        assert response.status_code == 201
        created = response.json()
        assert created["subscription_interval"] == "monthly"
        assert created["is_active"] is True

        response = await client.get(f"/api/products/{created['id']}")
        assert response.status_code == 200
        assert Decimal(response.json()["price"]) == Decimal("49")

    @pytest.mark.asyncio
    async def test_one_time_product_has_no_interval(self, client: AsyncClient):
        response = await client.post(
            "/api/products",
            json={"name": "Setup", "price": 300, "subscription_interval": "yearly"},
        )

        assert response.status_code == 201
        assert response.json()["subscription_interval"] is None

    @pytest.mark.asyncio
    async def test_rejects_negative_price(self, client: AsyncClient):
        response = await client.post("/api/products", json={"name": "Bad", "price": -1})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_active_only(self, client: AsyncClient, db_session: AsyncSession):
        await ProductFactory.create(db_session, name="Hosting")
        await ProductFactory.create(db_session, name="Audit", is_active=False)

        everything = (await client.get("/api/products")).json()
        offered = (await client.get("/api/products", params={"active_only": True})).json()

        assert [p["name"] for p in everything["items"]] == ["Audit", "Hosting"]
        assert everything["total"] == 2
        assert [p["name"] for p in offered["items"]] == ["Hosting"]
        assert offered["total"] == 1

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client: AsyncClient, db_session: AsyncSession):
        product = await ProductFactory.create(db_session)

        response = await client.patch(f"/api/products/{product.id}", json={"is_active": False})
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        response = await client.delete(f"/api/products/{product.id}")
        assert response.status_code == 204
        assert (await client.get(f"/api/products/{product.id}")).status_code == 404


class TestProposalProductLines:
    """Proposal lines picked from the catalog."""

    @pytest.mark.asyncio
    async def test_product_line_priced_from_catalog(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        deal = await DealFactory.create(db_session)
        product = await ProductFactory.create(
            db_session, name="Hosting", price=Decimal("20"), is_subscription=True,
            subscription_interval="monthly",
        )

        response = await client.post(
            "/api/proposals",
            json={
                "title": "Hosting",
                "customer_id": deal.customer_id,
                "deal_id": deal.id,
                "items": [{"product_id": product.id, "quantity": 3}],
            },
        )

        assert response.status_code == 201
        item = response.json()["items"][0]
        assert item["product_id"] == product.id
        assert item["product_name"] == "Hosting"
        assert item["is_subscription"] is True
        assert Decimal(item["total"]) == Decimal("60")

        deal_data = (await client.get(f"/api/deals/{deal.id}")).json()
        assert Decimal(deal_data["subscription_value"]) == Decimal("60")

    @pytest.mark.asyncio
    async def test_unknown_product_is_404(self, client: AsyncClient, db_session: AsyncSession):
        deal = await DealFactory.create(db_session)

        response = await client.post(
            "/api/proposals",
            json={
                "title": "P",
                "customer_id": deal.customer_id,
                "items": [{"product_id": 999, "quantity": 1}],
            },
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_custom_line_needs_price(self, client: AsyncClient, db_session: AsyncSession):
        deal = await DealFactory.create(db_session)

        response = await client.post(
            "/api/proposals",
            json={
                "title": "P",
                "customer_id": deal.customer_id,
                "items": [{"description": "Custom", "quantity": 1}],
            },
        )

        assert response.status_code == 400
