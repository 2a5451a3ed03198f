"""
Unit tests for InvoiceService.

WHAT: Tests for invoicing accepted proposals and the payment workflow.

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from app.core.exceptions import (
    BusinessRuleViolation,
    InvalidStateTransitionError,
    InvoiceNotFoundError,
    ResourceAlreadyExistsError,
)
from app.models.base import utc_now
from app.models.invoice import InvoiceStatus
from app.models.proposal import ProposalStatus
from app.services.invoice_service import InvoiceService
from tests.factories import DealFactory, InvoiceFactory, ProposalFactory, line_item


class TestCreateFromProposal:
    """Tests for create_from_proposal()."""

    @pytest.mark.asyncio
    async def test_copies_amounts(self, db_session):
        deal = await DealFactory.create(db_session)
        proposal = await ProposalFactory.create(
            db_session,
            deal=deal,
            status=ProposalStatus.ACCEPTED,
            items=[line_item(200)],
            discount_percentage=Decimal("10"),
            tax_percentage=Decimal("25"),
        )

        invoice = await InvoiceService(db_session).create_from_proposal(proposal.id, due_days=14)

        year = utc_now().year
        assert invoice.invoice_number == f"INV-{year}-0001"
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.customer_id == proposal.customer_id
        assert invoice.deal_id == deal.id
        assert invoice.subtotal == Decimal("200.00")
        assert invoice.discount_amount == Decimal("20.00")
        assert invoice.tax == Decimal("45.00")
        assert invoice.total == Decimal("225.00")
        assert invoice.due_date == date.today() + timedelta(days=14)
        assert invoice.items[0]["total"] == 200.0

    @pytest.mark.asyncio
    async def test_numbers_are_sequential(self, db_session):
        service = InvoiceService(db_session)
        first = await ProposalFactory.create(db_session, status=ProposalStatus.ACCEPTED)
        second = await ProposalFactory.create(db_session, status=ProposalStatus.ACCEPTED)

        a = await service.create_from_proposal(first.id)
        b = await service.create_from_proposal(second.id)

        assert a.invoice_number.endswith("-0001")
        assert b.invoice_number.endswith("-0002")

    @pytest.mark.asyncio
    async def test_only_accepted(self, db_session):
        proposal = await ProposalFactory.create(db_session, status=ProposalStatus.SENT)

        with pytest.raises(BusinessRuleViolation):
            await InvoiceService(db_session).create_from_proposal(proposal.id)

    @pytest.mark.asyncio
    async def test_only_once(self, db_session):
        proposal = await ProposalFactory.create(db_session, status=ProposalStatus.ACCEPTED)
        service = InvoiceService(db_session)
        await service.create_from_proposal(proposal.id)

        with pytest.raises(ResourceAlreadyExistsError):
            await service.create_from_proposal(proposal.id)


class TestWorkflow:
    """Tests for invoice status transitions."""

    @pytest.mark.asyncio
    async def test_send_then_pay(self, db_session):
        invoice = await InvoiceFactory.create(db_session)
        service = InvoiceService(db_session)

        sent = await service.mark_sent(invoice.id)
        assert sent.status == InvoiceStatus.SENT
        assert sent.sent_at is not None

        paid = await service.mark_paid(invoice.id)
        assert paid.status == InvoiceStatus.PAID
        assert paid.paid_at is not None

    @pytest.mark.asyncio
    async def test_paid_is_final(self, db_session):
        invoice = await InvoiceFactory.create(db_session, status=InvoiceStatus.PAID)
        service = InvoiceService(db_session)

        with pytest.raises(InvalidStateTransitionError):
            await service.cancel(invoice.id)
        with pytest.raises(InvalidStateTransitionError):
            await service.mark_sent(invoice.id)

    @pytest.mark.asyncio
    async def test_update_overdue(self, db_session):
        service = InvoiceService(db_session)
        late = await InvoiceFactory.create(
            db_session,
            status=InvoiceStatus.SENT,
            due_date=date.today() - timedelta(days=1),
        )
        on_time = await InvoiceFactory.create(db_session, status=InvoiceStatus.SENT)
        draft = await InvoiceFactory.create(
            db_session, due_date=date.today() - timedelta(days=10)
        )

        flagged = await service.update_overdue()

        assert [i.id for i in flagged] == [late.id]
        assert (await service.get(on_time.id)).status == InvoiceStatus.SENT
        assert (await service.get(draft.id)).status == InvoiceStatus.DRAFT

    @pytest.mark.asyncio
    async def test_unknown_invoice(self, db_session):
        with pytest.raises(InvoiceNotFoundError):
            await InvoiceService(db_session).get(123)
