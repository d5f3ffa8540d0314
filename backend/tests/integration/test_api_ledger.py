"""
Integration tests for Ledger API endpoints.
"""
from decimal import Decimal

import pytest
from fastapi import status


async def create_entity(client, headers, phone="01700000001", name="Karim"):
    response = await client.post(
        "/api/v1/entities",
        json={"name": name, "phone": phone, "type": "Customer"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


async def create_transaction(client, headers, entity_id, amount="500", **extra):
    body = {
        "entity_id": entity_id,
        "amount": amount,
        "direction": "INCOME",
        "transaction_date": "2026-03-10T12:00:00Z",
    }
    body.update(extra)
    response = await client.post("/api/v1/transactions", json=body, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


async def entity_totals(client, headers, entity_id):
    data = (await client.get(f"/api/v1/entities/{entity_id}", headers=headers)).json()
    return Decimal(str(data["total_owed_to_me"])), Decimal(str(data["total_i_owe_them"]))


class TestLedgerAccess:

    @pytest.mark.asyncio
    async def test_requires_token(self, async_client):
        response = await async_client.get("/api/v1/entities")

        assert response.status_code in [
            status.HTTP_401_UNAUTHORIZED,
            status.HTTP_403_FORBIDDEN,
        ]

    @pytest.mark.asyncio
    async def test_staff_reads_but_cannot_write(self, async_client, staff_headers):
        listed = await async_client.get("/api/v1/entities", headers=staff_headers)
        created = await async_client.post(
            "/api/v1/entities",
            json={"name": "Karim", "phone": "01700000001", "type": "Customer"},
            headers=staff_headers,
        )

        assert listed.status_code == status.HTTP_200_OK
        assert created.status_code == status.HTTP_403_FORBIDDEN


class TestLedgerFlow:
    """Test the transaction lifecycle through the API."""

    @pytest.mark.asyncio
    async def test_income_lifecycle(self, async_client, tenant_admin_headers):
        entity = await create_entity(async_client, tenant_admin_headers)
        txn = await create_transaction(async_client, tenant_admin_headers, entity["id"])

        assert txn["status"] == "Pending"
        assert await entity_totals(async_client, tenant_admin_headers, entity["id"]) == (
            Decimal("500"), Decimal("0"),
        )

        paid = await async_client.patch(
            f"/api/v1/transactions/{txn['id']}/status",
            json={"status": "Paid"},
            headers=tenant_admin_headers,
        )
        assert paid.json()["status"] == "Paid"
        assert await entity_totals(async_client, tenant_admin_headers, entity["id"]) == (
            Decimal("0"), Decimal("0"),
        )

        deleted = await async_client.delete(
            f"/api/v1/transactions/{txn['id']}", headers=tenant_admin_headers
        )
        assert deleted.status_code == status.HTTP_200_OK
        assert await entity_totals(async_client, tenant_admin_headers, entity["id"]) == (
            Decimal("0"), Decimal("0"),
        )

    @pytest.mark.asyncio
    async def test_duplicate_phone(self, async_client, tenant_admin_headers):
        await create_entity(async_client, tenant_admin_headers)

        response = await async_client.post(
            "/api/v1/entities",
            json={"name": "Someone", "phone": "01700000001", "type": "Supplier"},
            headers=tenant_admin_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.asyncio
    async def test_amount_must_be_positive(self, async_client, tenant_admin_headers):
        entity = await create_entity(async_client, tenant_admin_headers)

        response = await async_client.post(
            "/api/v1/transactions",
            json={
                "entity_id": entity["id"],
                "amount": "-5",
                "direction": "EXPENSE",
                "transaction_date": "2026-03-10T12:00:00Z",
            },
            headers=tenant_admin_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_with_date_range(self, async_client, tenant_admin_headers):
        entity = await create_entity(async_client, tenant_admin_headers)
        await create_transaction(
            async_client, tenant_admin_headers, entity["id"],
            transaction_date="2026-03-10T22:15:00Z",
        )
        await create_transaction(
            async_client, tenant_admin_headers, entity["id"],
            transaction_date="2026-03-12T08:00:00Z",
        )

        response = await async_client.get(
            "/api/v1/transactions?from=2026-03-01&to=2026-03-10",
            headers=tenant_admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_recalculate(self, async_client, tenant_admin_headers):
        entity = await create_entity(async_client, tenant_admin_headers)
        await create_transaction(async_client, tenant_admin_headers, entity["id"], amount="80.25")

        response = await async_client.post(
            f"/api/v1/entities/{entity['id']}/recalculate", headers=tenant_admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(str(response.json()["total_owed_to_me"])) == Decimal("80.25")
