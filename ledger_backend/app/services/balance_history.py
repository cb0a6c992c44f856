"""
Balance history query service.

Read views over the balance audit trail (paginated history, chronological
timeline, change summary) and the retention pruning job.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete

from ledger_backend.app.core.config import settings
from ledger_backend.app.domain.ledger.balance_ledger import BalanceLedger
from ledger_backend.app.models.client import Client
from ledger_backend.app.models.work import Work
from ledger_backend.app.models.balance_history import BalanceHistory
from ledger_backend.app.schemas.balance_history import (
    EnrichedBalanceHistoryEntry, TimelineEntry, BalanceHistoryPage, BalanceTimeline,
    BalanceChangeSummary, ChangeTypeSummary, DateRange, HistoryCleanupResult,
)
from ledger_backend.app.schemas.work import WorkResponse

logger = logging.getLogger("ledger.history")

NEWEST_FIRST = (BalanceHistory.created_at.desc(), BalanceHistory.id.desc())
OLDEST_FIRST = (BalanceHistory.created_at.asc(), BalanceHistory.id.asc())


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def _load_works(db: AsyncSession, entries: List[BalanceHistory]) -> Dict[int, Work]:
    """Current snapshot of the works referenced by entries; deleted works are simply absent."""
    work_ids = {entry.work_id for entry in entries if entry.work_id is not None}
    if not work_ids:
        return {}
    result = await db.execute(select(Work).where(Work.id.in_(work_ids)))
    return {work.id: work for work in result.scalars().all()}


def _work_details(works: Dict[int, Work], work_id: Optional[int]) -> Optional[WorkResponse]:
    work = works.get(work_id) if work_id is not None else None
    return WorkResponse.model_validate(work) if work else None


async def get_client_balance_history(
    db: AsyncSession,
    client_id: int,
    limit: int = 50,
    offset: int = 0,
) -> BalanceHistoryPage:
    """
    Get a page of a client's balance history, newest first.

    Args:
        db: Database session
        client_id: Client to read history for
        limit: Page size
        offset: Entries to skip from the newest

    Returns:
        Entries in [offset, offset + limit) enriched with work details,
        the total entry count and whether more entries follow
    """
    await BalanceLedger.get_client(db, client_id)

    total = (await db.execute(
        select(func.count(BalanceHistory.id)).where(BalanceHistory.client_id == client_id)
    )).scalar() or 0

    result = await db.execute(
        select(BalanceHistory)
        .where(BalanceHistory.client_id == client_id)
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
    )
    entries = result.scalars().all()
    works = await _load_works(db, entries)

    history = [
        EnrichedBalanceHistoryEntry.model_validate(entry).model_copy(
            update={"work_details": _work_details(works, entry.work_id)}
        )
        for entry in entries
    ]
    return BalanceHistoryPage(history=history, total=total, has_more=offset + limit < total)


async def get_client_balance_timeline(
    db: AsyncSession,
    client_id: int,
    limit: int = 100,
) -> BalanceTimeline:
    """
    Get a client's balance history oldest first.

    Each entry's running balance is the new_balance it recorded; entries are
    snapshots, so nothing is replayed.
    """
    client = await BalanceLedger.get_client(db, client_id)

    result = await db.execute(
        select(BalanceHistory)
        .where(BalanceHistory.client_id == client_id)
        .order_by(*OLDEST_FIRST)
        .limit(limit)
    )
    entries = result.scalars().all()
    works = await _load_works(db, entries)

    timeline = [
        TimelineEntry(
            **EnrichedBalanceHistoryEntry.model_validate(entry).model_dump(exclude={"work_details"}),
            work_details=_work_details(works, entry.work_id),
            running_balance=entry.new_balance,
        )
        for entry in entries
    ]
    return BalanceTimeline(
        timeline=timeline,
        current_balance=client.balance,
        total_entries=len(timeline),
    )


async def get_balance_change_summary(
    db: AsyncSession,
    client_id: int,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
) -> BalanceChangeSummary:
    """
    Summarize a client's balance changes within an optional creation-time window.

    Increases and decreases are summed separately as magnitudes; net change is
    their difference. Counts and signed sums are also grouped by change type.
    """
    await BalanceLedger.get_client(db, client_id)

    query = select(BalanceHistory).where(BalanceHistory.client_id == client_id)
    if from_date is not None:
        query = query.where(BalanceHistory.created_at >= _as_utc(from_date))
    if to_date is not None:
        query = query.where(BalanceHistory.created_at <= _as_utc(to_date))
    entries = (await db.execute(query.order_by(*OLDEST_FIRST))).scalars().all()

    total_increase = sum(e.balance_change for e in entries if e.balance_change > 0)
    total_decrease = sum(-e.balance_change for e in entries if e.balance_change < 0)

    changes_by_type: Dict = {}
    for entry in entries:
        bucket = changes_by_type.setdefault(entry.change_type, ChangeTypeSummary())
        bucket.count += 1
        bucket.total_change += entry.balance_change

    return BalanceChangeSummary(
        total_entries=len(entries),
        total_increase=total_increase,
        total_decrease=total_decrease,
        net_change=total_increase - total_decrease,
        changes_by_type=changes_by_type,
        date_range=DateRange(from_date=from_date, to_date=to_date),
    )


async def cleanup_balance_history(
    db: AsyncSession,
    keep_last_n: Optional[int] = None,
) -> HistoryCleanupResult:
    """
    Keep only the newest N history entries per client and delete the rest.

    Entries left behind by deleted clients are pruned too. Irreversible.
    The caller commits.
    """
    keep_last_n = keep_last_n or settings.history_keep_last_n

    client_ids = set((await db.execute(select(Client.id))).scalars().all())
    client_ids.update((await db.execute(select(BalanceHistory.client_id).distinct())).scalars().all())
    client_ids = sorted(client_ids)
    entries_deleted = 0

    for client_id in client_ids:
        stale_ids = (await db.execute(
            select(BalanceHistory.id)
            .where(BalanceHistory.client_id == client_id)
            .order_by(*NEWEST_FIRST)
            .offset(keep_last_n)
        )).scalars().all()
        if not stale_ids:
            continue
        await db.execute(delete(BalanceHistory).where(BalanceHistory.id.in_(stale_ids)))
        entries_deleted += len(stale_ids)

    await db.flush()
    logger.info(
        "Balance history cleanup: %s clients processed, %s entries deleted (keep_last_n=%s)",
        len(client_ids), entries_deleted, keep_last_n,
    )
    return HistoryCleanupResult(
        clients_processed=len(client_ids),
        entries_deleted=entries_deleted,
        keep_last_n=keep_last_n,
    )
