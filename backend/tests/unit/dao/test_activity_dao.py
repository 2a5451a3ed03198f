"""
Unit tests for Activity DAO.

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest
from datetime import timedelta

from app.dao.activity import ActivityDAO
from app.models.base import utc_now
from tests.factories import ActivityFactory, CustomerFactory, DealFactory


class TestActivityDAO:
    """Tests for ActivityDAO queries."""

    @pytest.mark.asyncio
    async def test_get_by_customer_includes_deals(self, db_session):
        deal = await DealFactory.create(db_session)
        customer = await CustomerFactory.create(db_session)
        await ActivityFactory.create(db_session, deal=deal, title="Deal call")
        await ActivityFactory.create(db_session, customer=customer, title="Other customer")

        dao = ActivityDAO(db_session)
        with_deals = await dao.get_by_customer(deal.customer_id)
        without_deals = await dao.get_by_customer(deal.customer_id, include_deals=False)

        assert [a.title for a in with_deals] == ["Deal call"]
        assert without_deals == []

    @pytest.mark.asyncio
    async def test_open_items_order(self, db_session):
        customer = await CustomerFactory.create(db_session)
        now = utc_now()
        undated = await ActivityFactory.create(db_session, customer=customer)
        later = await ActivityFactory.create(
            db_session, customer=customer, due_date=now + timedelta(days=3)
        )
        sooner = await ActivityFactory.create(
            db_session, customer=customer, due_date=now + timedelta(days=1)
        )
        await ActivityFactory.create(db_session, customer=customer, completed=True)

        items = await ActivityDAO(db_session).get_open_items()
        assert [a.id for a in items] == [sooner.id, later.id, undated.id]

    @pytest.mark.asyncio
    async def test_mark_complete(self, db_session):
        customer = await CustomerFactory.create(db_session)
        activity = await ActivityFactory.create(db_session, customer=customer)

        done = await ActivityDAO(db_session).mark_complete(activity.id)
        assert done.completed is True
