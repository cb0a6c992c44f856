"""
Admin Maintenance API Endpoints.

Bulk balance repair and balance history retention.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ledger_backend.app.core.config import settings
from ledger_backend.app.core.dependencies import get_current_principal
from ledger_backend.app.db.session import get_db
from ledger_backend.app.domain.ledger.balance_ledger import BalanceLedger
from ledger_backend.app.schemas.auth import Principal
from ledger_backend.app.schemas.client import BalanceFixResponse
from ledger_backend.app.schemas.balance_history import HistoryCleanupResult
from ledger_backend.app.services import balance_history

router = APIRouter(prefix="/admin", tags=["Admin - Maintenance"])


@router.post("/balance-history/cleanup", response_model=HistoryCleanupResult)
async def cleanup_balance_history(
    keep_last_n: int = Query(settings.history_keep_last_n, ge=1),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """
    Keep only the newest N balance history entries per client.

    Destructive and irreversible.
    """
    result = await balance_history.cleanup_balance_history(db, keep_last_n=keep_last_n)
    await db.commit()
    return result


@router.post("/clients/reconcile", response_model=List[BalanceFixResponse])
async def reconcile_all_balances(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Fix balance drift for every client; returns the clients that changed."""
    fixes = await BalanceLedger.reconcile_all(db)
    await db.commit()
    return fixes
