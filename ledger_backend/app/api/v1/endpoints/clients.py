"""
Client API Endpoints.

Client directory CRUD plus per-client balance views: history, timeline,
change summary, consistency check, reconciliation and manual adjustments.
"""

from datetime import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from ledger_backend.app.core.config import settings
from ledger_backend.app.core.dependencies import get_current_principal
from ledger_backend.app.db.session import get_db
from ledger_backend.app.domain.clients.client_service import ClientService
from ledger_backend.app.domain.ledger.balance_ledger import BalanceLedger
from ledger_backend.app.models.ledger_enums import WorkType, BalanceType
from ledger_backend.app.schemas.auth import Principal
from ledger_backend.app.schemas.client import (
    ClientCreate, ClientUpdate, ClientResponse, ClientListResponse,
    BalanceAdjustmentCreate, BalanceConsistencyResponse,
)
from ledger_backend.app.schemas.balance_history import (
    BalanceHistoryPage, BalanceTimeline, BalanceChangeSummary, BalanceHistoryEntry,
)
from ledger_backend.app.services import balance_history

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_data: ClientCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Create a client. Phone, PAN and Aadhar must be unique."""
    client = await ClientService.create_client(db, client_data)
    await db.commit()
    await db.refresh(client)
    return ClientResponse.model_validate(client)


@router.get("", response_model=ClientListResponse)
async def list_clients(
    work_type: Optional[WorkType] = Query(None),
    balance_type: Optional[BalanceType] = Query(None),
    balance_min: Optional[int] = Query(None),
    balance_max: Optional[int] = Query(None),
    search: Optional[str] = Query(None, min_length=1),
    sort_by: Optional[str] = Query(None, pattern="^(name|balance|created_at)$"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.default_page_size, ge=1, le=500),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    result = await ClientService.list_clients(
        db,
        work_type=work_type,
        balance_type=balance_type,
        balance_min=balance_min,
        balance_max=balance_max,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        offset=offset,
        limit=limit,
    )
    return ClientListResponse(
        clients=[ClientResponse.model_validate(c) for c in result["clients"]],
        total=result["total"],
        has_more=result["has_more"],
    )


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    client = await ClientService.get_client(db, client_id)
    return ClientResponse.model_validate(client)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    client_data: ClientUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    client = await ClientService.update_client(db, client_id, client_data)
    await db.commit()
    await db.refresh(client)
    return ClientResponse.model_validate(client)


@router.delete("/{client_id}")
async def delete_client(
    client_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Delete a client that has no work records."""
    deleted_id = await ClientService.delete_client(db, client_id)
    await db.commit()
    return {"id": deleted_id}


# --- Balance views ---

@router.get("/{client_id}/balance-history", response_model=BalanceHistoryPage)
async def get_client_balance_history(
    client_id: int,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Balance history newest first, with referenced work details."""
    return await balance_history.get_client_balance_history(db, client_id, limit=limit, offset=offset)


@router.get("/{client_id}/balance-timeline", response_model=BalanceTimeline)
async def get_client_balance_timeline(
    client_id: int,
    limit: int = Query(100, ge=1, le=1000),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Balance history oldest first with the running balance at each entry."""
    return await balance_history.get_client_balance_timeline(db, client_id, limit=limit)


@router.get("/{client_id}/balance-summary", response_model=BalanceChangeSummary)
async def get_balance_change_summary(
    client_id: int,
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    return await balance_history.get_balance_change_summary(
        db, client_id, from_date=from_date, to_date=to_date
    )


@router.get("/{client_id}/balance-check", response_model=BalanceConsistencyResponse)
async def check_client_balance(
    client_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Compare the stored balance with the sum over the client's works."""
    return await BalanceLedger.check_consistency(db, client_id)


@router.post("/{client_id}/reconcile", response_model=ClientResponse)
async def reconcile_client_balance(
    client_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Recompute the balance from the work records, recording any correction."""
    await BalanceLedger.reconcile(db, client_id)
    await db.commit()
    client = await ClientService.get_client(db, client_id)
    await db.refresh(client)
    return ClientResponse.model_validate(client)


@router.post(
    "/{client_id}/balance-adjustments",
    response_model=Optional[BalanceHistoryEntry],
    status_code=status.HTTP_201_CREATED,
)
async def adjust_client_balance(
    client_id: int,
    adjustment: BalanceAdjustmentCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Apply a manual balance adjustment; a zero amount records nothing."""
    entry = await BalanceLedger.adjust_manually(db, client_id, adjustment.amount, adjustment.description)
    await db.commit()
    if entry is None:
        return None
    await db.refresh(entry)
    return BalanceHistoryEntry.model_validate(entry)
