"""
Client Directory Service.

Client CRUD with uniqueness checks on phone, PAN and Aadhar numbers. Field
formats are validated by the request schemas before they reach this layer.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ledger_backend.app.core.dates import utcnow
from ledger_backend.app.core.exceptions import (
    ResourceNotFoundError, DuplicateResourceError, ClientHasWorksError
)
from ledger_backend.app.models.client import Client
from ledger_backend.app.models.work import Work
from ledger_backend.app.models.ledger_enums import WorkType, BalanceType
from ledger_backend.app.schemas.client import ClientCreate, ClientUpdate

UNIQUE_FIELDS = (
    ("phone", "phone number"),
    ("pan_number", "PAN number"),
    ("aadhar_number", "Aadhar number"),
)

SORT_KEYS = {
    "name": lambda client: client.name.lower(),
    "balance": lambda client: client.balance,
    "created_at": lambda client: (client.created_at, client.id),
}


def matches_balance_type(balance: int, balance_type: BalanceType) -> bool:
    if balance_type == BalanceType.POSITIVE:
        return balance > 0
    if balance_type == BalanceType.NEGATIVE:
        return balance < 0
    return balance == 0


class ClientService:

    @staticmethod
    async def get_client(db: AsyncSession, client_id: int) -> Client:
        client = await db.get(Client, client_id)
        if not client:
            raise ResourceNotFoundError("Client", client_id)
        return client

    @staticmethod
    async def _ensure_unique(db: AsyncSession, data: ClientCreate, exclude_id: Optional[int] = None):
        """
        Raises:
            DuplicateResourceError: if another client already uses the phone, PAN or Aadhar
        """
        for field, label in UNIQUE_FIELDS:
            value = getattr(data, field)
            if not value:
                continue
            query = select(Client.id).where(getattr(Client, field) == value)
            if exclude_id is not None:
                query = query.where(Client.id != exclude_id)
            if (await db.execute(query.limit(1))).scalar_one_or_none() is not None:
                raise DuplicateResourceError("Client", label)

    @staticmethod
    async def create_client(db: AsyncSession, data: ClientCreate) -> Client:
        await ClientService._ensure_unique(db, data)

        now = utcnow()
        client = Client(
            name=data.name,
            date_of_birth=data.date_of_birth,
            address=data.address,
            phone=data.phone,
            email=data.email,
            pan_number=data.pan_number,
            aadhar_number=data.aadhar_number,
            work_types=[work_type.value for work_type in data.work_types],
            balance=0,
            created_at=now,
            updated_at=now,
        )
        db.add(client)
        await db.flush()
        return client

    @staticmethod
    async def update_client(db: AsyncSession, client_id: int, data: ClientUpdate) -> Client:
        client = await ClientService.get_client(db, client_id)
        await ClientService._ensure_unique(db, data, exclude_id=client_id)

        client.name = data.name
        client.date_of_birth = data.date_of_birth
        client.address = data.address
        client.phone = data.phone
        client.email = data.email
        client.pan_number = data.pan_number
        client.aadhar_number = data.aadhar_number
        client.work_types = [work_type.value for work_type in data.work_types]
        client.updated_at = utcnow()
        await db.flush()
        return client

    @staticmethod
    async def delete_client(db: AsyncSession, client_id: int) -> int:
        """Delete a client with no work records. Its balance history is kept."""
        client = await ClientService.get_client(db, client_id)

        has_works = (await db.execute(
            select(Work.id).where(Work.client_id == client_id).limit(1)
        )).scalar_one_or_none()
        if has_works is not None:
            raise ClientHasWorksError(client_id)

        await db.delete(client)
        await db.flush()
        return client_id

    @staticmethod
    async def list_clients(
        db: AsyncSession,
        work_type: Optional[WorkType] = None,
        balance_type: Optional[BalanceType] = None,
        balance_min: Optional[int] = None,
        balance_max: Optional[int] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
        offset: int = 0,
        limit: int = 50,
    ) -> Dict[str, Any]:
        """Filter, sort and paginate clients; returns {clients, total, has_more}."""
        query = select(Client).order_by(Client.id)
        if balance_min is not None:
            query = query.where(Client.balance >= balance_min)
        if balance_max is not None:
            query = query.where(Client.balance <= balance_max)
        clients = list((await db.execute(query)).scalars().all())

        if work_type is not None:
            clients = [c for c in clients if work_type.value in (c.work_types or [])]

        if balance_type is not None:
            clients = [c for c in clients if matches_balance_type(c.balance, balance_type)]

        if search:
            term = search.lower()
            clients = [
                c for c in clients
                if term in c.name.lower()
                or term in c.address.lower()
                or search in c.phone
                or (c.email and term in c.email.lower())
            ]

        if sort_by:
            clients.sort(key=SORT_KEYS[sort_by], reverse=sort_order == "desc")

        page = clients[offset:offset + limit]
        return {
            "clients": page,
            "total": len(clients),
            "has_more": offset + limit < len(clients),
        }
