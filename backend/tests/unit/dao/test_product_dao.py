"""
Unit tests for Product DAO.

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest

from app.dao.product import ProductDAO
from tests.factories import ProductFactory


class TestListing:
    """Tests for list_by_name() and search()."""

    @pytest.mark.asyncio
    async def test_list_by_name(self, db_session):
        await ProductFactory.create(db_session, name="Support")
        await ProductFactory.create(db_session, name="Hosting")
        await ProductFactory.create(db_session, name="Audit", is_active=False)
        dao = ProductDAO(db_session)

        assert [p.name for p in await dao.list_by_name()] == ["Audit", "Hosting", "Support"]
        assert [p.name for p in await dao.list_by_name(active_only=True)] == [
            "Hosting",
            "Support",
        ]

    @pytest.mark.asyncio
    async def test_list_by_name_pages(self, db_session):
        for name in ("A", "B", "C"):
            await ProductFactory.create(db_session, name=name)

        page = await ProductDAO(db_session).list_by_name(skip=1, limit=1)

        assert [p.name for p in page] == ["B"]

    @pytest.mark.asyncio
    async def test_search_name_and_description(self, db_session):
        await ProductFactory.create(db_session, name="Managed Hosting")
        await ProductFactory.create(db_session, name="Backup", description="Offsite hosting backups")
        await ProductFactory.create(db_session, name="Training")

        found = await ProductDAO(db_session).search("  HOSTING ")

        assert [p.name for p in found] == ["Backup", "Managed Hosting"]
