"""
Integration tests for the client directory and balance maintenance endpoints.
"""

import pytest
from sqlalchemy import select, update

from ledger_backend.app.models.balance_history import BalanceHistory
from ledger_backend.app.models.client import Client


@pytest.mark.asyncio
async def test_create_client_starts_at_zero(client, client_payload):
    response = await client.post("/v1/clients", json=client_payload(
        name="  Priya Ghosh  ",
        pan_number="abcde1234f",
        email="priya@example.com",
        work_types=["p-tax", "p-tax", "online-work"],
    ))

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Priya Ghosh"
    assert data["balance"] == 0
    assert data["pan_number"] == "ABCDE1234F"
    assert data["work_types"] == ["p-tax", "online-work"]


@pytest.mark.asyncio
@pytest.mark.parametrize("override", [
    {"name": "A"},
    {"date_of_birth": "1990-08-15"},
    {"date_of_birth": "15/08/1850"},
    {"address": "Too short"},
    {"phone": "12345"},
    {"email": "not-an-email"},
    {"pan_number": "12345ABCDE"},
    {"aadhar_number": "1234"},
    {"work_types": ["unknown"]},
])
async def test_client_validation(client, client_payload, override):
    response = await client.post("/v1/clients", json=client_payload(**override))

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_phone_with_country_code_accepted(client, client_payload):
    response = await client.post("/v1/clients", json=client_payload(phone="+91 98300-11111"))
    assert response.status_code == 201
    assert response.json()["phone"] == "9830011111"


@pytest.mark.asyncio
@pytest.mark.parametrize("field, stored, variant", [
    ("phone", "9830022222", "+91 98300 22222"),
    ("phone", "98300-33333", "9830033333"),
    ("aadhar_number", "1234 5678 9012", "123456789012"),
])
async def test_formatting_variants_are_duplicates(client, client_payload, create_client, field, stored, variant):
    await create_client(**{field: stored})

    response = await client.post("/v1/clients", json=client_payload(**{field: variant}))

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_DUPLICATE_001"


@pytest.mark.asyncio
@pytest.mark.parametrize("field, value", [
    ("phone", "9830099999"),
    ("pan_number", "FGHIJ5678K"),
    ("aadhar_number", "123412341234"),
])
async def test_duplicate_identifiers_rejected(client, client_payload, create_client, field, value):
    await create_client(**{field: value})

    response = await client.post("/v1/clients", json=client_payload(**{field: value}))

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_DUPLICATE_001"


@pytest.mark.asyncio
async def test_update_client_keeps_balance(client, client_payload, create_client, create_work):
    owner = await create_client()
    await create_work(owner["id"], total_price=400)

    response = await client.put(
        f"/v1/clients/{owner['id']}",
        json=client_payload(name="Renamed Client", phone=owner["phone"]),
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed Client"
    assert response.json()["balance"] == 400


@pytest.mark.asyncio
async def test_update_client_to_taken_phone(client, client_payload, create_client):
    first = await create_client()
    second = await create_client()

    response = await client.put(
        f"/v1/clients/{second['id']}", json=client_payload(phone=first["phone"])
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_client_with_works_blocked(client, create_client, create_work):
    owner = await create_client()
    await create_work(owner["id"], total_price=100)

    response = await client.delete(f"/v1/clients/{owner['id']}")

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CONFLICT_001"


@pytest.mark.asyncio
async def test_delete_client_keeps_history(client, create_client, db_session):
    owner = await create_client()
    await client.post(f"/v1/clients/{owner['id']}/balance-adjustments", json={"amount": 250})

    response = await client.delete(f"/v1/clients/{owner['id']}")

    assert response.status_code == 200
    assert response.json() == {"id": owner["id"]}
    assert (await client.get(f"/v1/clients/{owner['id']}")).status_code == 404

    entries = (await db_session.execute(
        select(BalanceHistory).where(BalanceHistory.client_id == owner["id"])
    )).scalars().all()
    assert [(e.change_type.value, e.balance_change) for e in entries] == [("manual_adjustment", 250)]


@pytest.mark.asyncio
async def test_cleanup_prunes_history_of_deleted_clients(client, create_client, db_session):
    owner = await create_client()
    for amount in (1, 2, 3):
        await client.post(f"/v1/clients/{owner['id']}/balance-adjustments", json={"amount": amount})
    assert (await client.delete(f"/v1/clients/{owner['id']}")).status_code == 200

    response = await client.post("/v1/admin/balance-history/cleanup", params={"keep_last_n": 1})

    assert response.json()["entries_deleted"] == 2
    remaining = (await db_session.execute(
        select(BalanceHistory.balance_change).where(BalanceHistory.client_id == owner["id"])
    )).scalars().all()
    assert remaining == [3]


@pytest.mark.asyncio
async def test_list_clients_filters_and_sorting(client, create_client):
    owing = await create_client(name="Bimal Roy", work_types=["life-insurance"])
    credit = await create_client(name="Anil Kapoor", work_types=["mutual-funds"])
    await create_client(name="Chitra Bose", address="99 Salt Lake Sector V, Kolkata")
    await client.post(f"/v1/clients/{owing['id']}/balance-adjustments", json={"amount": 500})
    await client.post(f"/v1/clients/{credit['id']}/balance-adjustments", json={"amount": -300})

    data = (await client.get("/v1/clients", params={"sort_by": "name"})).json()
    assert [c["name"] for c in data["clients"]] == ["Anil Kapoor", "Bimal Roy", "Chitra Bose"]
    assert data["total"] == 3
    assert data["has_more"] is False

    data = (await client.get("/v1/clients", params={"sort_by": "balance", "sort_order": "desc"})).json()
    assert [c["balance"] for c in data["clients"]] == [500, 0, -300]

    data = (await client.get("/v1/clients", params={"balance_type": "negative"})).json()
    assert [c["name"] for c in data["clients"]] == ["Anil Kapoor"]

    data = (await client.get("/v1/clients", params={"balance_min": 0})).json()
    assert {c["name"] for c in data["clients"]} == {"Bimal Roy", "Chitra Bose"}

    data = (await client.get("/v1/clients", params={"work_type": "life-insurance"})).json()
    assert [c["name"] for c in data["clients"]] == ["Bimal Roy"]

    data = (await client.get("/v1/clients", params={"search": "salt lake"})).json()
    assert [c["name"] for c in data["clients"]] == ["Chitra Bose"]

    data = (await client.get("/v1/clients", params={"limit": 2})).json()
    assert len(data["clients"]) == 2
    assert data["has_more"] is True


@pytest.mark.asyncio
async def test_opening_balance_via_adjustment(client, create_client):
    owner = await create_client()

    response = await client.post(
        f"/v1/clients/{owner['id']}/balance-adjustments",
        json={"amount": 1200, "description": "Opening balance"},
    )

    assert response.status_code == 201
    entry = response.json()
    assert entry["change_type"] == "manual_adjustment"
    assert entry["previous_balance"] == 0
    assert entry["new_balance"] == 1200
    assert entry["description"] == "Opening balance"


@pytest.mark.asyncio
async def test_zero_adjustment_records_nothing(client, create_client):
    owner = await create_client()

    response = await client.post(f"/v1/clients/{owner['id']}/balance-adjustments", json={"amount": 0})

    assert response.status_code == 201
    assert response.json() is None


@pytest.mark.asyncio
async def test_balance_check_and_reconcile(client, create_client, create_work, db_session):
    owner = await create_client()
    await create_work(owner["id"], total_price=800, paid_amount=300)

    # Simulate drift by writing the balance behind the ledger's back
    await db_session.execute(update(Client).where(Client.id == owner["id"]).values(balance=100))
    await db_session.commit()

    check = (await client.get(f"/v1/clients/{owner['id']}/balance-check")).json()
    assert check == {
        "client_id": owner["id"],
        "stored_balance": 100,
        "calculated_balance": 500,
        "is_consistent": False,
        "difference": -400,
    }

    fixes = (await client.post("/v1/admin/clients/reconcile")).json()
    assert fixes == [{
        "client_id": owner["id"],
        "client_name": owner["name"],
        "old_balance": 100,
        "new_balance": 500,
        "difference": 400,
    }]

    history = (await client.get(f"/v1/clients/{owner['id']}/balance-history")).json()
    assert history["history"][0]["change_type"] == "balance_correction"
    assert history["history"][0]["description"] == "Balance recalculated from work records"


@pytest.mark.asyncio
async def test_reconcile_single_client(client, create_client):
    owner = await create_client()
    await client.post(f"/v1/clients/{owner['id']}/balance-adjustments", json={"amount": 75})

    response = await client.post(f"/v1/clients/{owner['id']}/reconcile")

    assert response.status_code == 200
    # Manual adjustments are not backed by works, so reconciliation resets them
    assert response.json()["balance"] == 0


@pytest.mark.asyncio
async def test_unknown_client(client, client_payload):
    assert (await client.get("/v1/clients/77")).status_code == 404
    assert (await client.put("/v1/clients/77", json=client_payload())).status_code == 404
    assert (await client.delete("/v1/clients/77")).status_code == 404
    assert (await client.get("/v1/clients/77/balance-check")).status_code == 404
