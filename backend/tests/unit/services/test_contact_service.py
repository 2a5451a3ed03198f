"""
Unit tests for ContactService.

WHAT: Tests for the primary contact rule and deal/activity involvement.

WHY: Verifies that:
1. A customer's first contact becomes primary
2. There is never more than one primary contact per customer
3. Deleting or moving the primary contact promotes the next one
4. Contacts only join deals and activities of their own customer

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest

from app.core.exceptions import (
    BusinessRuleViolation,
    ContactNotFoundError,
    CustomerNotFoundError,
    DealNotFoundError,
)
from app.dao.contact import ContactDAO
from app.services.contact_service import ContactService
from tests.factories import ActivityFactory, ContactFactory, CustomerFactory, DealFactory


def _contact_data(customer_id, first_name="Grace", last_name="Hopper", **extra):
    return {
        "customer_id": customer_id,
        "first_name": first_name,
        "last_name": last_name,
        "email": f"{first_name.lower()}@example.com",
        **extra,
    }


async def _primary_ids(session, customer_id):
    contacts = await ContactDAO(session).get_by_customer(customer_id)
    return [c.id for c in contacts if c.is_primary]


class TestPrimaryContact:
    """Tests for create(), set_primary() and delete()."""

    @pytest.mark.asyncio
    async def test_first_contact_becomes_primary(self, db_session):
        customer = await CustomerFactory.create(db_session)
        service = ContactService(db_session)

        first = await service.create(_contact_data(customer.id, is_primary=False))
        second = await service.create(_contact_data(customer.id, first_name="Alan"))

        assert first.is_primary is True
        assert second.is_primary is False

    @pytest.mark.asyncio
    async def test_new_primary_replaces_old(self, db_session):
        customer = await CustomerFactory.create(db_session)
        service = ContactService(db_session)
        await service.create(_contact_data(customer.id))

        second = await service.create(
            _contact_data(customer.id, first_name="Alan", is_primary=True)
        )

        assert await _primary_ids(db_session, customer.id) == [second.id]

    @pytest.mark.asyncio
    async def test_set_primary(self, db_session):
        customer = await CustomerFactory.create(db_session)
        service = ContactService(db_session)
        await service.create(_contact_data(customer.id))
        other = await service.create(_contact_data(customer.id, first_name="Alan"))

        promoted = await service.set_primary(other.id)

        assert promoted.is_primary is True
        assert await _primary_ids(db_session, customer.id) == [other.id]

    @pytest.mark.asyncio
    async def test_deleting_primary_promotes_next(self, db_session):
        customer = await CustomerFactory.create(db_session)
        service = ContactService(db_session)
        primary = await service.create(_contact_data(customer.id))
        other = await service.create(_contact_data(customer.id, first_name="Alan"))

        await service.delete(primary.id)

        assert await _primary_ids(db_session, customer.id) == [other.id]

    @pytest.mark.asyncio
    async def test_deleting_last_contact(self, db_session):
        customer = await CustomerFactory.create(db_session)
        service = ContactService(db_session)
        only = await service.create(_contact_data(customer.id))

        await service.delete(only.id)

        assert await service.list_for_customer(customer.id) == []

    @pytest.mark.asyncio
    async def test_update_unsetting_primary_keeps_one(self, db_session):
        customer = await CustomerFactory.create(db_session)
        service = ContactService(db_session)
        only = await service.create(_contact_data(customer.id))

        updated = await service.update(only.id, {"is_primary": False})

        assert updated.is_primary is True

    @pytest.mark.asyncio
    async def test_unknown_customer(self, db_session):
        with pytest.raises(CustomerNotFoundError):
            await ContactService(db_session).create(_contact_data(999))

    @pytest.mark.asyncio
    async def test_unknown_contact(self, db_session):
        with pytest.raises(ContactNotFoundError):
            await ContactService(db_session).get(999)


class TestMoveContact:
    """Moving a contact to another customer."""

    @pytest.mark.asyncio
    async def test_move_promotes_on_both_sides(self, db_session):
        old_customer = await CustomerFactory.create(db_session)
        new_customer = await CustomerFactory.create(db_session)
        service = ContactService(db_session)
        moving = await service.create(_contact_data(old_customer.id))
        staying = await service.create(_contact_data(old_customer.id, first_name="Alan"))

        moved = await service.update(moving.id, {"customer_id": new_customer.id})

        assert moved.customer_id == new_customer.id
        assert moved.is_primary is True
        assert await _primary_ids(db_session, old_customer.id) == [staying.id]

    @pytest.mark.asyncio
    async def test_move_to_customer_with_primary(self, db_session):
        old_customer = await CustomerFactory.create(db_session)
        new_customer = await CustomerFactory.create(db_session)
        service = ContactService(db_session)
        existing = await service.create(_contact_data(new_customer.id))
        moving = await service.create(_contact_data(old_customer.id, first_name="Alan"))

        moved = await service.update(moving.id, {"customer_id": new_customer.id})

        assert moved.is_primary is False
        assert await _primary_ids(db_session, new_customer.id) == [existing.id]

    @pytest.mark.asyncio
    async def test_move_drops_links(self, db_session):
        old_customer = await CustomerFactory.create(db_session)
        new_customer = await CustomerFactory.create(db_session)
        deal = await DealFactory.create(db_session, customer=old_customer)
        activity = await ActivityFactory.create(db_session, customer=old_customer)
        service = ContactService(db_session)
        contact = await service.create(_contact_data(old_customer.id))
        await service.link_deal(contact.id, deal.id)
        await service.link_activity(contact.id, activity.id)

        await service.update(contact.id, {"customer_id": new_customer.id})

        assert await service.list_deals(contact.id) == []
        assert await service.list_activities(contact.id) == []

    @pytest.mark.asyncio
    async def test_move_to_unknown_customer(self, db_session):
        contact = await ContactFactory.create(db_session)

        with pytest.raises(CustomerNotFoundError):
            await ContactService(db_session).update(contact.id, {"customer_id": 999})


class TestDealInvolvement:
    """Tests for linking contacts to deals."""

    @pytest.mark.asyncio
    async def test_link_and_list(self, db_session):
        deal = await DealFactory.create(db_session)
        customer_id = deal.customer_id
        service = ContactService(db_session)
        contact = await service.create(_contact_data(customer_id))

        await service.link_deal(contact.id, deal.id)

        assert [c.id for c in await service.list_for_deal(deal.id)] == [contact.id]
        assert [d.id for d in await service.list_deals(contact.id)] == [deal.id]

    @pytest.mark.asyncio
    async def test_contact_of_other_customer_rejected(self, db_session):
        deal = await DealFactory.create(db_session)
        stranger = await ContactFactory.create(db_session)

        with pytest.raises(BusinessRuleViolation) as exc_info:
            await ContactService(db_session).link_deal(stranger.id, deal.id)

        assert "does not belong to the deal's customer" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_set_deal_contacts_checks_every_contact(self, db_session):
        deal = await DealFactory.create(db_session)
        customer_id = deal.customer_id
        service = ContactService(db_session)
        own = await service.create(_contact_data(customer_id))
        stranger = await ContactFactory.create(db_session)

        with pytest.raises(BusinessRuleViolation):
            await service.set_deal_contacts(deal.id, [own.id, stranger.id])

        assert await service.list_for_deal(deal.id) == []

    @pytest.mark.asyncio
    async def test_set_deal_contacts_replaces(self, db_session):
        deal = await DealFactory.create(db_session)
        customer_id = deal.customer_id
        service = ContactService(db_session)
        first = await service.create(_contact_data(customer_id))
        second = await service.create(_contact_data(customer_id, first_name="Alan"))
        await service.link_deal(first.id, deal.id)

        contacts = await service.set_deal_contacts(deal.id, [second.id])

        assert [c.id for c in contacts] == [second.id]

    @pytest.mark.asyncio
    async def test_unknown_deal(self, db_session):
        contact = await ContactFactory.create(db_session)

        with pytest.raises(DealNotFoundError):
            await ContactService(db_session).link_deal(contact.id, 999)


class TestActivityInvolvement:
    """Tests for linking contacts to activities."""

    @pytest.mark.asyncio
    async def test_activity_on_deal_uses_deal_customer(self, db_session):
        deal = await DealFactory.create(db_session)
        customer_id = deal.customer_id
        activity = await ActivityFactory.create(db_session, deal=deal)
        service = ContactService(db_session)
        contact = await service.create(_contact_data(customer_id))

        await service.link_activity(contact.id, activity.id)

        assert [c.id for c in await service.list_for_activity(activity.id)] == [contact.id]

    @pytest.mark.asyncio
    async def test_contact_of_other_customer_rejected(self, db_session):
        customer = await CustomerFactory.create(db_session)
        activity = await ActivityFactory.create(db_session, customer=customer)
        stranger = await ContactFactory.create(db_session)

        with pytest.raises(BusinessRuleViolation):
            await ContactService(db_session).link_activity(stranger.id, activity.id)

    @pytest.mark.asyncio
    async def test_set_and_unlink(self, db_session):
        customer = await CustomerFactory.create(db_session)
        activity = await ActivityFactory.create(db_session, customer=customer)
        service = ContactService(db_session)
        first = await service.create(_contact_data(customer.id))
        second = await service.create(_contact_data(customer.id, first_name="Alan"))

        await service.set_activity_contacts(activity.id, [first.id, second.id])
        await service.unlink_activity(first.id, activity.id)

        assert [c.id for c in await service.list_for_activity(activity.id)] == [second.id]
