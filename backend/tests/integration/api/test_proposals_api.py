"""
Integration tests for proposal API.

WHAT: Tests for proposal CRUD and workflow operations via HTTP API.

WHY: Proposals drive the value of their deal. These tests ensure:
1. Totals are calculated on create and update
2. Every proposal change is reflected in the deal value
3. Workflow transitions (send, view, accept, reject) follow the rules
4. Answered proposals cannot be repriced

HOW: Uses pytest-asyncio with AsyncClient for HTTP testing.
"""

import pytest
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.proposal import ProposalStatus
from tests.factories import CustomerFactory, DealFactory, ProposalFactory


def _item(unit_price, quantity=1, is_subscription=False):
    return {
        "description": "Line",
        "quantity": quantity,
        "unit_price": unit_price,
        "is_subscription": is_subscription,
        "subscription_interval": "monthly" if is_subscription else None,
    }


class TestProposalCreate:
    """Integration tests for proposal creation endpoint."""

    @pytest.mark.asyncio
    async def test_create_updates_deal_value(self, client: AsyncClient, db_session: AsyncSession):
        """
        Creating proposals revalues their deal.

        WHY: Deal value = sum of all proposal subtotals, split into
        subscription and one-time revenue.
        """
        deal = await DealFactory.create(db_session)

        first = await client.post(
            "/api/proposals",
            json={
                "title": "Build",
                "customer_id": deal.customer_id,
                "deal_id": deal.id,
                "items": [_item(100), _item(20, is_subscription=True)],
                "discount_percentage": 10,
                "tax_percentage": 8,
            },
        )
        second = await client.post(
            "/api/proposals",
            json={
                "title": "Extras",
                "customer_id": deal.customer_id,
                "deal_id": deal.id,
                "items": [_item(25, quantity=2)],
            },
        )

        assert first.status_code == 201
        data = first.json()
        assert data["status"] == "draft"
        assert Decimal(data["subtotal"]) == Decimal("120")
        assert Decimal(data["discount_amount"]) == Decimal("12")
        assert Decimal(data["tax_amount"]) == Decimal("8.64")
        assert Decimal(data["total"]) == Decimal("116.64")
        assert Decimal(data["items"][0]["total"]) == Decimal("100")
        assert data["is_editable"] is True
        assert second.status_code == 201

        deal_data = (await client.get(f"/api/deals/{deal.id}")).json()
        assert Decimal(deal_data["value"]) == Decimal("170")
        assert Decimal(deal_data["subscription_value"]) == Decimal("20")
        assert Decimal(deal_data["one_time_value"]) == Decimal("150")

    @pytest.mark.asyncio
    async def test_rejects_fractional_quantity(self, client: AsyncClient, db_session: AsyncSession):
        customer = await CustomerFactory.create(db_session)

        response = await client.post(
            "/api/proposals",
            json={"title": "X", "customer_id": customer.id, "items": [_item(10, quantity=1.5)]},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_rejects_discount_over_100(self, client: AsyncClient, db_session: AsyncSession):
        customer = await CustomerFactory.create(db_session)

        response = await client.post(
            "/api/proposals",
            json={"title": "X", "customer_id": customer.id, "discount_percentage": 101},
        )
        assert response.status_code == 400


class TestProposalUpdate:
    """Integration tests for update and delete."""

    @pytest.mark.asyncio
    async def test_update_items(self, client: AsyncClient, db_session: AsyncSession):
        deal = await DealFactory.create(db_session)
        created = (
            await client.post(
                "/api/proposals",
                json={
                    "title": "P",
                    "customer_id": deal.customer_id,
                    "deal_id": deal.id,
                    "items": [_item(10)],
                },
            )
        ).json()

        response = await client.patch(
            f"/api/proposals/{created['id']}", json={"items": [_item(30, quantity=2)]}
        )

        assert response.status_code == 200
        assert Decimal(response.json()["subtotal"]) == Decimal("60")
        deal_data = (await client.get(f"/api/deals/{deal.id}")).json()
        assert Decimal(deal_data["value"]) == Decimal("60")

    @pytest.mark.asyncio
    async def test_answered_proposal_cannot_be_repriced(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        proposal = await ProposalFactory.create(db_session, status=ProposalStatus.ACCEPTED)

        response = await client.patch(
            f"/api/proposals/{proposal.id}", json={"tax_percentage": 5}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_revalues_deal(self, client: AsyncClient, db_session: AsyncSession):
        deal = await DealFactory.create(db_session)
        created = (
            await client.post(
                "/api/proposals",
                json={
                    "title": "P",
                    "customer_id": deal.customer_id,
                    "deal_id": deal.id,
                    "items": [_item(80)],
                },
            )
        ).json()

        response = await client.delete(f"/api/proposals/{created['id']}")
        assert response.status_code == 204

        deal_data = (await client.get(f"/api/deals/{deal.id}")).json()
        assert Decimal(deal_data["value"]) == Decimal("0")


class TestProposalWorkflow:
    """Integration tests for status transitions."""

    @pytest.mark.asyncio
    async def test_send_view_accept(self, client: AsyncClient, db_session: AsyncSession):
        proposal = await ProposalFactory.create(db_session)

        response = await client.post(f"/api/proposals/{proposal.id}/send")
        assert response.json()["status"] == "sent"

        response = await client.post(f"/api/proposals/{proposal.id}/view")
        assert response.json()["status"] == "viewed"

        response = await client.post(f"/api/proposals/{proposal.id}/accept")
        data = response.json()
        assert data["status"] == "accepted"
        assert data["responded_at"] is not None
        assert data["is_editable"] is False

    @pytest.mark.asyncio
    async def test_view_draft_is_noop(self, client: AsyncClient, db_session: AsyncSession):
        proposal = await ProposalFactory.create(db_session)

        response = await client.post(f"/api/proposals/{proposal.id}/view")

        assert response.status_code == 200
        assert response.json()["status"] == "draft"

    @pytest.mark.asyncio
    async def test_cannot_accept_rejected(self, client: AsyncClient, db_session: AsyncSession):
        proposal = await ProposalFactory.create(db_session, status=ProposalStatus.REJECTED)

        response = await client.post(f"/api/proposals/{proposal.id}/accept")

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidStateTransitionError"

    @pytest.mark.asyncio
    async def test_list_and_stats(self, client: AsyncClient, db_session: AsyncSession):
        deal = await DealFactory.create(db_session)
        await ProposalFactory.create(db_session, deal=deal)
        await ProposalFactory.create(db_session, deal=deal, status=ProposalStatus.ACCEPTED)
        await ProposalFactory.create(db_session)

        response = await client.get("/api/proposals", params={"deal_id": deal.id})
        assert response.json()["total"] == 2

        response = await client.get("/api/proposals", params={"status": "accepted"})
        assert response.json()["total"] == 1

        stats = (await client.get("/api/proposals/stats")).json()
        assert stats["by_status"] == {"draft": 2, "accepted": 1}
        assert Decimal(stats["accepted_value"]) == Decimal("100")

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient):
        response = await client.get("/api/proposals/999")
        assert response.status_code == 404
