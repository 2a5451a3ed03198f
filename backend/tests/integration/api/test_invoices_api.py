"""
Integration tests for invoice API.

WHAT: Tests for invoicing accepted proposals and the payment workflow.

HOW: Uses pytest-asyncio with AsyncClient for HTTP testing.
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.invoice import InvoiceStatus
from app.models.proposal import ProposalStatus
from tests.factories import InvoiceFactory, ProposalFactory


class TestInvoicesApi:
    """Integration tests for /api/invoices."""

    @pytest.mark.asyncio
    async def test_invoice_accepted_proposal(self, client: AsyncClient, db_session: AsyncSession):
        proposal = await ProposalFactory.create(db_session, status=ProposalStatus.ACCEPTED)

        response = await client.post("/api/invoices", json={"proposal_id": proposal.id})

        assert response.status_code == 201
        data = response.json()
        assert data["invoice_number"].startswith("INV-")
        assert data["status"] == "draft"
        assert Decimal(data["total"]) == Decimal("100")

        again = await client.post("/api/invoices", json={"proposal_id": proposal.id})
        assert again.status_code == 409

    @pytest.mark.asyncio
    async def test_draft_proposal_cannot_be_invoiced(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        proposal = await ProposalFactory.create(db_session)

        response = await client.post("/api/invoices", json={"proposal_id": proposal.id})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_send_and_pay(self, client: AsyncClient, db_session: AsyncSession):
        invoice = await InvoiceFactory.create(db_session)

        assert (await client.post(f"/api/invoices/{invoice.id}/send")).json()["status"] == "sent"
        response = await client.post(f"/api/invoices/{invoice.id}/pay")

        assert response.json()["status"] == "paid"
        assert response.json()["paid_at"] is not None

    @pytest.mark.asyncio
    async def test_cancel_paid_rejected(self, client: AsyncClient, db_session: AsyncSession):
        invoice = await InvoiceFactory.create(db_session, status=InvoiceStatus.PAID)

        response = await client.post(f"/api/invoices/{invoice.id}/cancel")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_overdue(self, client: AsyncClient, db_session: AsyncSession):
        late = await InvoiceFactory.create(
            db_session,
            status=InvoiceStatus.SENT,
            due_date=date.today() - timedelta(days=3),
        )

        response = await client.post("/api/invoices/update-overdue")

        assert [i["id"] for i in response.json()] == [late.id]
        assert (await client.get(f"/api/invoices/{late.id}")).json()["status"] == "overdue"
