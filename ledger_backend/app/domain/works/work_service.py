"""
Work Transaction Service (Domain Logic).

CRUD for billable work transactions. Every mutation derives the payment status
and routes the balance change it introduces through the BalanceLedger, inside
the caller's transaction.
"""

import logging
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from ledger_backend.app.core.config import settings
from ledger_backend.app.core.dates import utcnow, in_date_range
from ledger_backend.app.core.exceptions import ResourceNotFoundError, InvalidAmountError
from ledger_backend.app.domain.ledger.balance_ledger import BalanceLedger
from ledger_backend.app.domain.ledger.payment_status import determine_payment_status, outstanding_amount
from ledger_backend.app.models.client import Client
from ledger_backend.app.models.work import Work
from ledger_backend.app.models.ledger_enums import BalanceChangeType, PaymentStatus, WorkType
from ledger_backend.app.schemas.work import WorkCreate, WorkUpdate, WorkStatsResponse

logger = logging.getLogger("ledger.works")


def validate_amounts(total_price: int, paid_amount: int) -> None:
    """
    Raises:
        InvalidAmountError: negative amounts, or overpayment when it is disallowed
    """
    if total_price < 0:
        raise InvalidAmountError("Total price cannot be negative", "total_price", total_price)
    if paid_amount < 0:
        raise InvalidAmountError("Paid amount cannot be negative", "paid_amount", paid_amount)
    if not settings.allow_overpayment and paid_amount > total_price:
        raise InvalidAmountError("Paid amount cannot exceed total price", "paid_amount", paid_amount)


class WorkService:

    @staticmethod
    async def get_work(db: AsyncSession, work_id: int) -> Work:
        work = await db.get(Work, work_id)
        if not work:
            raise ResourceNotFoundError("Work", work_id)
        return work

    @staticmethod
    async def _ensure_client(db: AsyncSession, client_id: int) -> Client:
        client = await db.get(Client, client_id)
        if not client:
            raise ResourceNotFoundError("Client", client_id)
        return client

    @staticmethod
    async def create_work(db: AsyncSession, data: WorkCreate) -> Work:
        """
        Create a work transaction and charge its outstanding amount to the client.

        Flow:
        1. Validate client exists
        2. Validate amounts
        3. Derive payment status
        4. Insert work
        5. Ledger: +(total - paid), work_created
        """
        await WorkService._ensure_client(db, data.client_id)
        validate_amounts(data.total_price, data.paid_amount)

        now = utcnow()
        work = Work(
            client_id=data.client_id,
            transaction_date=data.transaction_date,
            total_price=data.total_price,
            paid_amount=data.paid_amount,
            work_types=[work_type.value for work_type in data.work_types],
            description=data.description,
            payment_status=determine_payment_status(data.total_price, data.paid_amount),
            created_at=now,
            updated_at=now,
        )
        db.add(work)
        await db.flush()  # To get work.id

        await BalanceLedger.apply_change(
            db,
            work.client_id,
            outstanding_amount(work.total_price, work.paid_amount),
            BalanceChangeType.WORK_CREATED,
            work_id=work.id,
            description=f"Work created: {work.description}",
        )
        return work

    @staticmethod
    async def update_work(db: AsyncSession, work_id: int, data: WorkUpdate) -> Work:
        """
        Apply a partial update and move the balance accordingly.

        When the work changes owner, its old contribution is removed from the
        previous client and its new contribution added to the new client.
        """
        work = await WorkService.get_work(db, work_id)

        old_client_id = work.client_id
        old_remainder = outstanding_amount(work.total_price, work.paid_amount)

        new_client_id = data.client_id if data.client_id is not None else old_client_id
        moved = new_client_id != old_client_id
        if moved:
            await WorkService._ensure_client(db, new_client_id)

        total_price = data.total_price if data.total_price is not None else work.total_price
        paid_amount = data.paid_amount if data.paid_amount is not None else work.paid_amount
        validate_amounts(total_price, paid_amount)

        work.client_id = new_client_id
        work.total_price = total_price
        work.paid_amount = paid_amount
        if data.transaction_date is not None:
            work.transaction_date = data.transaction_date
        if data.work_types is not None:
            work.work_types = [work_type.value for work_type in data.work_types]
        if data.description is not None:
            work.description = data.description
        work.payment_status = determine_payment_status(total_price, paid_amount)
        work.updated_at = utcnow()
        await db.flush()

        new_remainder = outstanding_amount(total_price, paid_amount)
        description = f"Work updated: {work.description}"

        if moved:
            await BalanceLedger.apply_change(
                db, old_client_id, -old_remainder, BalanceChangeType.WORK_UPDATED,
                work_id=work.id, description="Work moved to another client",
            )
            await BalanceLedger.apply_change(
                db, new_client_id, new_remainder, BalanceChangeType.WORK_UPDATED,
                work_id=work.id, description=description,
            )
            logger.info("Work %s moved from client %s to %s", work.id, old_client_id, new_client_id)
        else:
            await BalanceLedger.apply_change(
                db, new_client_id, new_remainder - old_remainder, BalanceChangeType.WORK_UPDATED,
                work_id=work.id, description=description,
            )
        return work

    @staticmethod
    async def delete_work(db: AsyncSession, work_id: int) -> int:
        """Delete a work transaction and reverse its contribution to the balance."""
        work = await WorkService.get_work(db, work_id)

        client_id = work.client_id
        remainder = outstanding_amount(work.total_price, work.paid_amount)
        description = f"Work deleted: {work.description}"

        await db.delete(work)
        await db.flush()

        await BalanceLedger.apply_change(
            db, client_id, -remainder, BalanceChangeType.WORK_DELETED,
            work_id=work_id, description=description,
        )
        return work_id

    @staticmethod
    async def record_payment(db: AsyncSession, work_id: int, amount: int) -> Work:
        """Add a received payment to a work; the client's balance drops by the amount."""
        work = await WorkService.get_work(db, work_id)
        if amount <= 0:
            raise InvalidAmountError("Payment amount must be positive", "amount", amount)

        paid_amount = work.paid_amount + amount
        validate_amounts(work.total_price, paid_amount)

        work.paid_amount = paid_amount
        work.payment_status = determine_payment_status(work.total_price, paid_amount)
        work.updated_at = utcnow()
        await db.flush()

        await BalanceLedger.apply_change(
            db, work.client_id, -amount, BalanceChangeType.PAYMENT_MADE,
            work_id=work.id, description=f"Payment received: {work.description}",
        )
        return work

    @staticmethod
    async def list_works(
        db: AsyncSession,
        client_id: Optional[int] = None,
        work_type: Optional[WorkType] = None,
        payment_status: Optional[PaymentStatus] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Work]:
        """
        List works newest first.

        Client and status filters run in SQL. Work types are a multi-valued
        JSON field, so that filter (an any-of membership test) and the
        DD/MM/YYYY date window are applied to the scanned rows.
        """
        query = select(Work)
        if client_id is not None:
            query = query.where(Work.client_id == client_id)
        if payment_status is not None:
            query = query.where(Work.payment_status == payment_status)
        query = query.order_by(Work.created_at.desc(), Work.id.desc())

        works = (await db.execute(query)).scalars().all()

        if work_type is not None:
            works = [work for work in works if work_type.value in (work.work_types or [])]
        if date_from or date_to:
            works = [work for work in works if in_date_range(work.transaction_date, date_from, date_to)]

        works = works[offset:]
        if limit is not None:
            works = works[:limit]
        return works

    @staticmethod
    async def get_work_stats(db: AsyncSession) -> WorkStatsResponse:
        """Counts and sums by payment status over all works."""
        totals = (await db.execute(
            select(
                func.count(Work.id),
                func.coalesce(func.sum(Work.paid_amount), 0),
                func.coalesce(func.sum(Work.total_price), 0),
            )
        )).one()
        total_works, total_income, total_value = int(totals[0]), int(totals[1]), int(totals[2])

        status_rows = await db.execute(
            select(Work.payment_status, func.count(Work.id)).group_by(Work.payment_status)
        )
        by_status = {status: count for status, count in status_rows}

        return WorkStatsResponse(
            total_works=total_works,
            total_income=total_income,
            total_due=total_value - total_income,
            total_value=total_value,
            paid_works=by_status.get(PaymentStatus.PAID, 0),
            partial_works=by_status.get(PaymentStatus.PARTIAL, 0),
            unpaid_works=by_status.get(PaymentStatus.UNPAID, 0),
        )
