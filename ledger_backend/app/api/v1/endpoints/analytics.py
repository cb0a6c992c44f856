"""
Analytics API Endpoints.

Read-only dashboard data. Every view accepts an optional DD/MM/YYYY window on
transaction dates.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from ledger_backend.app.api.v1.params import DateWindow, date_window
from ledger_backend.app.core.dependencies import get_current_principal
from ledger_backend.app.db.session import get_db
from ledger_backend.app.schemas.auth import Principal
from ledger_backend.app.services.analytics import AnalyticsService
from ledger_backend.app.schemas.analytics import (
    OverviewStats, IncomeAnalytics, ClientAnalytics, ServiceAnalytics, PaymentAnalytics
)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/overview", response_model=OverviewStats)
async def get_overview(
    window: DateWindow = Depends(date_window),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get headline totals, payment status counts and client balance signs."""
    return await AnalyticsService.get_overview(db, window.date_from, window.date_to)


@router.get("/income", response_model=IncomeAnalytics, response_model_exclude_none=True)
async def get_income(
    group_by: Optional[str] = Query(None, pattern="^(month|work_type)$"),
    window: DateWindow = Depends(date_window),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get income totals, overall or grouped by month or work type."""
    return await AnalyticsService.get_income(db, window.date_from, window.date_to, group_by=group_by)


@router.get("/clients", response_model=ClientAnalytics)
async def get_client_analytics(
    limit: int = Query(10, ge=1, le=100),
    window: DateWindow = Depends(date_window),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get top clients by income and the spread of clients across work types."""
    return await AnalyticsService.get_client_analytics(db, window.date_from, window.date_to, limit=limit)


@router.get("/services", response_model=ServiceAnalytics)
async def get_service_analytics(
    window: DateWindow = Depends(date_window),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get per work type performance and monthly income trends."""
    return await AnalyticsService.get_service_analytics(db, window.date_from, window.date_to)


@router.get("/payments", response_model=PaymentAnalytics)
async def get_payment_analytics(
    window: DateWindow = Depends(date_window),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get collection efficiency and outstanding amounts."""
    return await AnalyticsService.get_payment_analytics(db, window.date_from, window.date_to)
