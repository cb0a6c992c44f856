"""
Balance history Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List, Dict
from ledger_backend.app.models.ledger_enums import BalanceChangeType
from ledger_backend.app.schemas.work import WorkResponse


class BalanceHistoryEntry(BaseModel):
    """A single balance transition."""
    id: int
    client_id: int
    work_id: Optional[int]
    previous_balance: int
    new_balance: int
    balance_change: int
    change_type: BalanceChangeType
    description: str
    created_at: datetime

    class Config:
        from_attributes = True


class EnrichedBalanceHistoryEntry(BalanceHistoryEntry):
    """History entry with the referenced work's current snapshot (None once deleted)."""
    work_details: Optional[WorkResponse] = None


class TimelineEntry(EnrichedBalanceHistoryEntry):
    running_balance: int


class BalanceHistoryPage(BaseModel):
    history: List[EnrichedBalanceHistoryEntry]
    total: int
    has_more: bool


class BalanceTimeline(BaseModel):
    timeline: List[TimelineEntry]
    current_balance: int
    total_entries: int


class ChangeTypeSummary(BaseModel):
    count: int = 0
    total_change: int = 0


class DateRange(BaseModel):
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None


class BalanceChangeSummary(BaseModel):
    total_entries: int
    total_increase: int
    total_decrease: int
    net_change: int
    changes_by_type: Dict[BalanceChangeType, ChangeTypeSummary]
    date_range: DateRange


class HistoryCleanupResult(BaseModel):
    clients_processed: int
    entries_deleted: int
    keep_last_n: int
