"""
Work Transaction API Endpoints.

Every mutation commits once, after the work record and the client balance
have both been written.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from ledger_backend.app.api.v1.params import DateWindow, date_window
from ledger_backend.app.core.dependencies import get_current_principal
from ledger_backend.app.db.session import get_db
from ledger_backend.app.domain.works.work_service import WorkService
from ledger_backend.app.models.ledger_enums import WorkType, PaymentStatus
from ledger_backend.app.schemas.auth import Principal
from ledger_backend.app.schemas.work import (
    WorkCreate, WorkUpdate, WorkResponse, WorkIdResponse, WorkStatsResponse, PaymentCreate
)

router = APIRouter(prefix="/works", tags=["Works"])


@router.post("", response_model=WorkResponse, status_code=status.HTTP_201_CREATED)
async def create_work(
    work_data: WorkCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a work transaction.

    The client's balance grows by the unpaid part of the work.
    """
    work = await WorkService.create_work(db, work_data)
    await db.commit()
    await db.refresh(work)
    return WorkResponse.model_validate(work)


@router.get("", response_model=List[WorkResponse])
async def list_works(
    client_id: Optional[int] = Query(None),
    work_type: Optional[WorkType] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    window: DateWindow = Depends(date_window),
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """List works newest first with optional filters."""
    works = await WorkService.list_works(
        db,
        client_id=client_id,
        work_type=work_type,
        payment_status=payment_status,
        date_from=window.date_from,
        date_to=window.date_to,
        offset=offset,
        limit=limit,
    )
    return [WorkResponse.model_validate(work) for work in works]


@router.get("/stats", response_model=WorkStatsResponse)
async def get_work_stats(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Counts and sums by payment status over all works."""
    return await WorkService.get_work_stats(db)


@router.get("/{work_id}", response_model=WorkResponse)
async def get_work(
    work_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    work = await WorkService.get_work(db, work_id)
    return WorkResponse.model_validate(work)


@router.patch("/{work_id}", response_model=WorkResponse)
async def update_work(
    work_id: int,
    work_data: WorkUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a work transaction.

    Moving a work to another client rebalances both clients.
    """
    work = await WorkService.update_work(db, work_id, work_data)
    await db.commit()
    await db.refresh(work)
    return WorkResponse.model_validate(work)


@router.delete("/{work_id}", response_model=WorkIdResponse)
async def delete_work(
    work_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    deleted_id = await WorkService.delete_work(db, work_id)
    await db.commit()
    return WorkIdResponse(id=deleted_id)


@router.post("/{work_id}/payments", response_model=WorkResponse)
async def record_payment(
    work_id: int,
    payment: PaymentCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Record a payment received against a work."""
    work = await WorkService.record_payment(db, work_id, payment.amount)
    await db.commit()
    await db.refresh(work)
    return WorkResponse.model_validate(work)
