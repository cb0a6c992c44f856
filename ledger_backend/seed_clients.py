"""
Database seeding script for demo clients.

Creates a few clients with work transactions so the dashboards and balance
views have data. Run this after the database is reachable.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from ledger_backend.app.db.session import AsyncSessionLocal, engine, Base
from ledger_backend.app.domain.clients.client_service import ClientService
from ledger_backend.app.domain.works.work_service import WorkService
from ledger_backend.app.models.client import Client
from ledger_backend.app.models.ledger_enums import WorkType
from ledger_backend.app.schemas.client import ClientCreate
from ledger_backend.app.schemas.work import WorkCreate

DEMO_CLIENTS = [
    {
        "client": ClientCreate(
            name="Ananya Sen",
            date_of_birth="14/03/1985",
            address="22 Lake Road, Kolkata 700029",
            phone="9830012345",
            email="ananya@example.com",
            pan_number="ABCDE1234F",
            work_types=[WorkType.INCOME_TAX, WorkType.MUTUAL_FUNDS],
        ),
        "works": [
            ("05/04/2024", [WorkType.INCOME_TAX], "ITR filing FY23-24", 250000, 250000),
            ("18/06/2024", [WorkType.MUTUAL_FUNDS], "SIP registration", 50000, 0),
        ],
    },
    {
        "client": ClientCreate(
            name="Rahul Das",
            date_of_birth="02/11/1978",
            address="7B Park Street, Kolkata 700016",
            phone="9830054321",
            work_types=[WorkType.HEALTH_INSURANCE, WorkType.LIFE_INSURANCE],
        ),
        "works": [
            ("10/05/2024", [WorkType.HEALTH_INSURANCE, WorkType.LIFE_INSURANCE], "Policy renewals", 400000, 150000),
        ],
    },
]


async def seed_clients():
    """Seed demo clients and their works; skips when clients already exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting client seeding...")

        existing = (await db.execute(select(Client.id).limit(1))).scalar_one_or_none()
        if existing is not None:
            print("ℹ️  Clients already exist, skipping seeding")
            return

        for entry in DEMO_CLIENTS:
            client = await ClientService.create_client(db, entry["client"])
            for transaction_date, work_types, description, total, paid in entry["works"]:
                await WorkService.create_work(db, WorkCreate(
                    client_id=client.id,
                    transaction_date=transaction_date,
                    work_types=work_types,
                    description=description,
                    total_price=total,
                    paid_amount=paid,
                ))
            print(f"✅ Created client {client.name} (balance: {client.balance})")

        await db.commit()
        print("\n🎉 Client seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed_clients())
