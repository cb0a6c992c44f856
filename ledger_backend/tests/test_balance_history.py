"""
Integration tests for balance history views and retention.
"""

import pytest
from datetime import datetime, timedelta, timezone

from ledger_backend.app.domain.clients.client_service import ClientService
from ledger_backend.app.domain.ledger.balance_ledger import BalanceLedger
from ledger_backend.app.models.ledger_enums import BalanceChangeType, WorkType
from ledger_backend.app.schemas.client import ClientCreate
from ledger_backend.app.services import balance_history


async def adjust(client, client_id, amount, description=None):
    response = await client.post(
        f"/v1/clients/{client_id}/balance-adjustments",
        json={"amount": amount, "description": description},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_history_pagination(client, create_client):
    owner = await create_client()
    for amount in (10, 20, 30, 40, 50):
        await adjust(client, owner["id"], amount)

    response = await client.get(
        f"/v1/clients/{owner['id']}/balance-history", params={"limit": 2, "offset": 1}
    )

    assert response.status_code == 200
    page = response.json()
    assert page["total"] == 5
    assert page["has_more"] is True
    assert [e["balance_change"] for e in page["history"]] == [40, 30]


@pytest.mark.asyncio
async def test_history_last_page_has_no_more(client, create_client):
    owner = await create_client()
    for amount in (1, 2, 3):
        await adjust(client, owner["id"], amount)

    page = (await client.get(
        f"/v1/clients/{owner['id']}/balance-history", params={"limit": 2, "offset": 2}
    )).json()

    assert [e["balance_change"] for e in page["history"]] == [1]
    assert page["has_more"] is False


@pytest.mark.asyncio
async def test_history_enriched_with_current_work(client, create_client, create_work):
    owner = await create_client()
    work = await create_work(owner["id"], total_price=700, paid_amount=100)
    await client.post(f"/v1/works/{work['id']}/payments", json={"amount": 100})

    page = (await client.get(f"/v1/clients/{owner['id']}/balance-history")).json()

    created = page["history"][-1]
    assert created["work_id"] == work["id"]
    # Details are the work as it is now, not as it was when the entry was written
    assert created["work_details"]["paid_amount"] == 200
    assert created["description"] == "Work created: ITR filing"


@pytest.mark.asyncio
async def test_history_for_client_without_entries(client, create_client):
    owner = await create_client()

    page = (await client.get(f"/v1/clients/{owner['id']}/balance-history")).json()

    assert page == {"history": [], "total": 0, "has_more": False}


@pytest.mark.asyncio
async def test_history_views_unknown_client(client):
    for path in ("balance-history", "balance-timeline", "balance-summary"):
        response = await client.get(f"/v1/clients/999/{path}")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_timeline_is_chronological(client, create_client, create_work):
    owner = await create_client()
    await create_work(owner["id"], total_price=500)
    await adjust(client, owner["id"], -200, "Advance received")
    await create_work(owner["id"], total_price=300, paid_amount=100)

    response = await client.get(f"/v1/clients/{owner['id']}/balance-timeline")

    assert response.status_code == 200
    timeline = response.json()
    assert timeline["total_entries"] == 3
    assert timeline["current_balance"] == 500
    assert [e["running_balance"] for e in timeline["timeline"]] == [500, 300, 500]
    assert timeline["timeline"][1]["description"] == "Advance received"
    assert timeline["timeline"][1]["work_details"] is None


@pytest.mark.asyncio
async def test_timeline_limit_keeps_oldest(client, create_client):
    owner = await create_client()
    for amount in (5, 6, 7):
        await adjust(client, owner["id"], amount)

    timeline = (await client.get(
        f"/v1/clients/{owner['id']}/balance-timeline", params={"limit": 2}
    )).json()

    assert [e["balance_change"] for e in timeline["timeline"]] == [5, 6]
    assert timeline["current_balance"] == 18


@pytest.mark.asyncio
async def test_change_summary(client, create_client, create_work):
    owner = await create_client()
    work = await create_work(owner["id"], total_price=1000)
    await client.post(f"/v1/works/{work['id']}/payments", json={"amount": 400})
    await client.post(f"/v1/works/{work['id']}/payments", json={"amount": 100})
    await adjust(client, owner["id"], 50)

    response = await client.get(f"/v1/clients/{owner['id']}/balance-summary")

    assert response.status_code == 200
    summary = response.json()
    assert summary["total_entries"] == 4
    assert summary["total_increase"] == 1050
    assert summary["total_decrease"] == 500
    assert summary["net_change"] == 550
    assert summary["changes_by_type"]["payment_made"] == {"count": 2, "total_change": -500}
    assert summary["changes_by_type"]["work_created"] == {"count": 1, "total_change": 1000}
    assert summary["date_range"] == {"from_date": None, "to_date": None}


@pytest.mark.asyncio
async def test_change_summary_window_excludes_everything_in_future(db_session):
    owner = await ClientService.create_client(db_session, ClientCreate(
        name="Window Client",
        date_of_birth="01/01/1970",
        address="5 Window Street, Howrah",
        phone="9123456780",
        work_types=[WorkType.P_TAX],
    ))
    await BalanceLedger.apply_change(db_session, owner.id, 100, BalanceChangeType.MANUAL_ADJUSTMENT)
    await db_session.commit()

    future = datetime.now(timezone.utc) + timedelta(days=1)
    summary = await balance_history.get_balance_change_summary(db_session, owner.id, from_date=future)

    assert summary.total_entries == 0
    assert summary.net_change == 0
    assert summary.changes_by_type == {}


@pytest.mark.asyncio
async def test_cleanup_keeps_newest_entries(client, create_client):
    owner = await create_client()
    other = await create_client()
    for amount in range(1, 11):
        await adjust(client, owner["id"], amount)
    await adjust(client, other["id"], 99)

    response = await client.post("/v1/admin/balance-history/cleanup", params={"keep_last_n": 3})

    assert response.status_code == 200
    assert response.json() == {"clients_processed": 2, "entries_deleted": 7, "keep_last_n": 3}

    page = (await client.get(f"/v1/clients/{owner['id']}/balance-history")).json()
    assert page["total"] == 3
    assert [e["balance_change"] for e in page["history"]] == [10, 9, 8]
    assert (await client.get(f"/v1/clients/{other['id']}/balance-history")).json()["total"] == 1

    # Pruning never touches balances
    assert (await client.get(f"/v1/clients/{owner['id']}")).json()["balance"] == 55


@pytest.mark.asyncio
async def test_cleanup_rejects_non_positive_keep(client):
    response = await client.post("/v1/admin/balance-history/cleanup", params={"keep_last_n": 0})
    assert response.status_code == 422
