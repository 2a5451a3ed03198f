"""
Integration tests for CSV import API.

WHAT: Tests for customer and deal bulk import via JSON body and upload.

WHY: These tests ensure:
1. Good rows are imported even when other rows are rejected
2. Rejected rows are reported as "Row N: ..." with spreadsheet numbering
3. Structural problems come back as a single error, never a 5xx
4. Uploads enforce size and encoding limits

HOW: Uses pytest-asyncio with AsyncClient for HTTP testing.
"""

import pytest
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from tests.factories import CustomerFactory


class TestCustomerImport:
    """Integration tests for /api/imports/customers."""

    @pytest.mark.asyncio
    async def test_mixed_rows(self, client: AsyncClient):
        csv_text = (
            "name,email,company\n"
            "Ada Lovelace,ada@example.com,\"Engines, Ltd\"\n"
            "No Email,,Acme\n"
            "Grace Hopper,grace@example.com,Navy\n"
        )

        response = await client.post("/api/imports/customers", json={"csv_text": csv_text})

        assert response.status_code == 200
        assert response.json() == {
            "success_count": 2,
            "errors": ["Row 3: Missing required fields (name, email)"],
        }

        customers = (await client.get("/api/customers", params={"search": "engines"})).json()
        assert customers["items"][0]["company"] == "Engines, Ltd"

    @pytest.mark.asyncio
    async def test_existing_email_rejected(self, client: AsyncClient, db_session: AsyncSession):
        await CustomerFactory.create(db_session, email="ada@example.com")

        response = await client.post(
            "/api/imports/customers",
            json={"csv_text": "name,email\nAda,ADA@example.com\n"},
        )

        assert response.json() == {
            "success_count": 0,
            "errors": ["Row 2: Customer with email ADA@example.com already exists"],
        }

    @pytest.mark.asyncio
    async def test_missing_column_is_single_error(self, client: AsyncClient):
        response = await client.post(
            "/api/imports/customers", json={"csv_text": "name,phone\nAda,555\n"}
        )

        assert response.status_code == 200
        assert response.json() == {"success_count": 0, "errors": ["Missing required fields: email"]}

    @pytest.mark.asyncio
    async def test_empty_file(self, client: AsyncClient):
        response = await client.post("/api/imports/customers", json={"csv_text": ""})
        assert response.json() == {"success_count": 0, "errors": ["CSV file is empty"]}

    @pytest.mark.asyncio
    async def test_upload(self, client: AsyncClient):
        content = "\ufeffname,email\nAda,ada@example.com\n".encode("utf-8")

        response = await client.post(
            "/api/imports/customers/upload",
            files={"file": ("customers.csv", content, "text/csv")},
        )

        assert response.status_code == 200
        assert response.json() == {"success_count": 1, "errors": []}

    @pytest.mark.asyncio
    async def test_upload_not_utf8(self, client: AsyncClient):
        response = await client.post(
            "/api/imports/customers/upload",
            files={"file": ("customers.csv", b"name,email\n\xff\xfe,x@example.com\n", "text/csv")},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_too_large(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "CSV_IMPORT_MAX_BYTES", 10)

        response = await client.post(
            "/api/imports/customers/upload",
            files={"file": ("customers.csv", b"name,email\nAda,ada@example.com\n", "text/csv")},
        )
        assert response.status_code == 413


class TestDealImport:
    """Integration tests for /api/imports/deals."""

    @pytest.mark.asyncio
    async def test_import_deals(self, client: AsyncClient, db_session: AsyncSession):
        await CustomerFactory.create(db_session, email="ada@example.com")
        csv_text = (
            "title,customerEmail,value,probability,stage,type\n"
            "Hosting,ada@example.com,1200,80,negotiation,subscription\n"
            "Website,ada@example.com,5000,,,\n"
            "Ghost,nobody@example.com,10,,,\n"
        )

        response = await client.post("/api/imports/deals", json={"csv_text": csv_text})

        assert response.json() == {
            "success_count": 2,
            "errors": ["Row 4: Customer with email nobody@example.com not found"],
        }

        deals = (await client.get("/api/deals")).json()["items"]
        by_title = {d["title"]: d for d in deals}
        stages = {s["id"]: s["name"] for s in (await client.get("/api/deal-stages")).json()}

        hosting = by_title["Hosting"]
        assert stages[hosting["stage_id"]] == "Negotiation"
        assert hosting["probability"] == 80
        assert Decimal(hosting["subscription_value"]) == Decimal("1200")

        website = by_title["Website"]
        assert stages[website["stage_id"]] == "Lead"
        assert website["probability"] == settings.DEFAULT_DEAL_PROBABILITY
        assert Decimal(website["one_time_value"]) == Decimal("5000")

    @pytest.mark.asyncio
    async def test_missing_value_column(self, client: AsyncClient):
        response = await client.post(
            "/api/imports/deals",
            json={"csv_text": "title,customerEmail\nX,ada@example.com\n"},
        )
        assert response.json() == {"success_count": 0, "errors": ["Missing required fields: value"]}

    @pytest.mark.asyncio
    async def test_upload(self, client: AsyncClient, db_session: AsyncSession):
        await CustomerFactory.create(db_session, email="ada@example.com")
        content = b"title,customerEmail,value\nDeal,ada@example.com,99.5\n"

        response = await client.post(
            "/api/imports/deals/upload",
            files={"file": ("deals.csv", content, "text/csv")},
        )

        assert response.json() == {"success_count": 1, "errors": []}
