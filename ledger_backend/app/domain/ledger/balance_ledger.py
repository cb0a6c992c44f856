"""
Balance Ledger (Domain Logic).

Maintains each client's running balance and appends balance history entries.

Balances are maintained by incremental delta: every work mutation computes the
signed change it introduces and hands it to `apply_change`. Recomputing from
the work records is a separate repair operation (`reconcile`), recorded as a
balance correction, and is never part of the normal write path.

All methods flush but never commit; the caller owns the transaction.
"""

import logging
from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from ledger_backend.app.core.dates import utcnow
from ledger_backend.app.core.exceptions import ResourceNotFoundError
from ledger_backend.app.models.client import Client
from ledger_backend.app.models.work import Work
from ledger_backend.app.models.balance_history import BalanceHistory
from ledger_backend.app.models.ledger_enums import BalanceChangeType

logger = logging.getLogger("ledger.balance")


def default_description(change_type: BalanceChangeType) -> str:
    return f"Balance updated due to {change_type.value.replace('_', ' ')}"


class BalanceLedger:

    @staticmethod
    async def get_client(db: AsyncSession, client_id: int) -> Client:
        client = await db.get(Client, client_id)
        if not client:
            raise ResourceNotFoundError("Client", client_id)
        return client

    @staticmethod
    async def apply_change(
        db: AsyncSession,
        client_id: int,
        delta: int,
        change_type: BalanceChangeType,
        work_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Optional[BalanceHistory]:
        """
        Add a signed delta to a client's balance.

        Flow:
        1. Load client (NotFound if absent)
        2. Write the new balance
        3. Append one history entry, unless the delta is zero

        Args:
            db: Database session (transaction managed by caller)
            client_id: Client whose balance changes
            delta: Signed change in paise (positive = client owes more)
            change_type: Reason tag for the history entry
            work_id: Work transaction that caused the change, if any
            description: Human-readable reason; defaults from change_type

        Returns:
            The appended BalanceHistory entry, or None for a zero delta
        """
        client = await BalanceLedger.get_client(db, client_id)

        previous_balance = client.balance
        new_balance = previous_balance + delta

        client.balance = new_balance
        client.updated_at = utcnow()

        if new_balance == previous_balance:
            await db.flush()
            return None

        entry = BalanceHistory(
            client_id=client_id,
            work_id=work_id,
            previous_balance=previous_balance,
            new_balance=new_balance,
            balance_change=new_balance - previous_balance,
            change_type=change_type,
            description=description or default_description(change_type),
            created_at=utcnow(),
        )
        db.add(entry)
        await db.flush()

        logger.info(
            "Client %s balance %s -> %s (%s)",
            client_id, previous_balance, new_balance, change_type.value,
        )
        return entry

    @staticmethod
    async def adjust_manually(
        db: AsyncSession, client_id: int, amount: int, description: Optional[str] = None
    ) -> Optional[BalanceHistory]:
        """Record an explicit balance adjustment not backed by a work transaction."""
        return await BalanceLedger.apply_change(
            db,
            client_id,
            amount,
            BalanceChangeType.MANUAL_ADJUSTMENT,
            description=description or "Manual balance adjustment",
        )

    @staticmethod
    async def compute_expected_balance(db: AsyncSession, client_id: int) -> int:
        """Sum of (total_price - paid_amount) over the client's current works."""
        query = select(
            func.coalesce(func.sum(Work.total_price - Work.paid_amount), 0)
        ).where(Work.client_id == client_id)
        return int((await db.execute(query)).scalar() or 0)

    @staticmethod
    async def check_consistency(db: AsyncSession, client_id: int) -> Dict[str, Any]:
        """Compare the stored balance against the one implied by the work records."""
        client = await BalanceLedger.get_client(db, client_id)
        calculated = await BalanceLedger.compute_expected_balance(db, client_id)
        return {
            "client_id": client_id,
            "stored_balance": client.balance,
            "calculated_balance": calculated,
            "is_consistent": client.balance == calculated,
            "difference": client.balance - calculated,
        }

    @staticmethod
    async def reconcile(db: AsyncSession, client_id: int) -> Optional[BalanceHistory]:
        """
        Reset a client's balance to the sum over its works.

        Returns the balance_correction entry, or None when already consistent.
        """
        client = await BalanceLedger.get_client(db, client_id)
        calculated = await BalanceLedger.compute_expected_balance(db, client_id)
        drift = calculated - client.balance
        if drift:
            logger.warning("Client %s balance drifted by %s; correcting", client_id, -drift)
        return await BalanceLedger.apply_change(
            db,
            client_id,
            drift,
            BalanceChangeType.BALANCE_CORRECTION,
            description="Balance recalculated from work records",
        )

    @staticmethod
    async def reconcile_all(db: AsyncSession) -> List[Dict[str, Any]]:
        """Reconcile every client and report the ones that were corrected."""
        clients = (await db.execute(select(Client).order_by(Client.id))).scalars().all()
        fixes = []
        for client in clients:
            old_balance = client.balance
            entry = await BalanceLedger.reconcile(db, client.id)
            if entry is not None:
                fixes.append({
                    "client_id": client.id,
                    "client_name": client.name,
                    "old_balance": old_balance,
                    "new_balance": entry.new_balance,
                    "difference": entry.balance_change,
                })
        return fixes
