"""
Unit tests for Proposal DAO.

WHAT: Tests for ProposalDAO queries.

WHY: Verifies that:
1. get_by_deal returns every proposal of a deal whatever its status
2. Statistics group and sum correctly
3. unlink_deal detaches proposals without deleting them

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest
from decimal import Decimal

from app.dao.proposal import ProposalDAO
from app.models.proposal import ProposalStatus
from tests.factories import DealFactory, ProposalFactory, line_item


class TestQueries:
    """Tests for lookup methods."""

    @pytest.mark.asyncio
    async def test_get_by_deal_includes_all_statuses(self, db_session):
        deal = await DealFactory.create(db_session)
        for status in ProposalStatus:
            await ProposalFactory.create(db_session, deal=deal, status=status)
        await ProposalFactory.create(db_session)

        proposals = await ProposalDAO(db_session).get_by_deal(deal.id)
        assert {p.status for p in proposals} == set(ProposalStatus)

    @pytest.mark.asyncio
    async def test_get_by_customer(self, db_session):
        deal = await DealFactory.create(db_session)
        mine = await ProposalFactory.create(db_session, deal=deal)
        await ProposalFactory.create(db_session)

        proposals = await ProposalDAO(db_session).get_by_customer(deal.customer_id)
        assert [p.id for p in proposals] == [mine.id]

    @pytest.mark.asyncio
    async def test_list_recent_by_status(self, db_session):
        sent = await ProposalFactory.create(db_session, status=ProposalStatus.SENT)
        await ProposalFactory.create(db_session)

        proposals = await ProposalDAO(db_session).list_recent(status=ProposalStatus.SENT)
        assert [p.id for p in proposals] == [sent.id]


class TestStatistics:
    """Tests for count_by_status() and calculate_total_value()."""

    @pytest.mark.asyncio
    async def test_count_by_status(self, db_session):
        await ProposalFactory.create(db_session)
        await ProposalFactory.create(db_session)
        await ProposalFactory.create(db_session, status=ProposalStatus.ACCEPTED)

        counts = await ProposalDAO(db_session).count_by_status()
        assert counts == {"draft": 2, "accepted": 1}

    @pytest.mark.asyncio
    async def test_total_value(self, db_session):
        await ProposalFactory.create(db_session, items=[line_item(100)])
        await ProposalFactory.create(
            db_session, items=[line_item(50)], status=ProposalStatus.ACCEPTED
        )
        dao = ProposalDAO(db_session)

        assert await dao.calculate_total_value() == Decimal("150")
        assert await dao.calculate_total_value(ProposalStatus.ACCEPTED) == Decimal("50")

    @pytest.mark.asyncio
    async def test_total_value_empty(self, db_session):
        assert await ProposalDAO(db_session).calculate_total_value() == Decimal("0")


class TestUnlinkDeal:
    """Tests for unlink_deal()."""

    @pytest.mark.asyncio
    async def test_detaches_proposals(self, db_session):
        deal = await DealFactory.create(db_session)
        proposal = await ProposalFactory.create(db_session, deal=deal)
        dao = ProposalDAO(db_session)

        count = await dao.unlink_deal(deal.id)

        assert count == 1
        assert (await dao.get_by_id(proposal.id)).deal_id is None
        assert await dao.get_by_deal(deal.id) == []
