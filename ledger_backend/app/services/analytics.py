"""
Analytics Service.

Handles data aggregation for dashboards. READ-ONLY.

Transaction dates are DD/MM/YYYY strings, so the date window is applied to the
loaded works rather than in SQL. A work tagged with several work types counts
once towards each of them.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional, Dict

from ledger_backend.app.core.dates import in_date_range, month_key, month_sort_key
from ledger_backend.app.models.client import Client
from ledger_backend.app.models.work import Work
from ledger_backend.app.models.ledger_enums import PaymentStatus
from ledger_backend.app.schemas.analytics import (
    OverviewStats, PaymentBreakdown, ClientBalanceBreakdown,
    IncomeBucket, MonthlyIncome, WorkTypeIncome, IncomeAnalytics,
    ClientPerformance, WorkTypeCount, ClientAnalytics,
    ServicePerformance, ServiceAnalytics,
    PaymentOverview, StatusValue, PartialStatusValue, PaymentStatusBreakdown,
    MonthlyCollection, OutstandingByWorkType, PaymentAnalytics,
)


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def _add_to_bucket(bucket: IncomeBucket, work: Work) -> None:
    bucket.income += work.paid_amount
    bucket.due += work.total_price - work.paid_amount
    bucket.total += work.total_price
    bucket.count += 1


class AnalyticsService:

    @staticmethod
    async def _works_in_window(
        db: AsyncSession, date_from: Optional[str], date_to: Optional[str]
    ) -> List[Work]:
        works = (await db.execute(select(Work).order_by(Work.id))).scalars().all()
        return [w for w in works if in_date_range(w.transaction_date, date_from, date_to)]

    @staticmethod
    async def _clients(db: AsyncSession) -> List[Client]:
        return list((await db.execute(select(Client).order_by(Client.id))).scalars().all())

    @staticmethod
    async def get_overview(
        db: AsyncSession, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> OverviewStats:
        """Totals, payment status counts and client balance signs."""
        clients = await AnalyticsService._clients(db)
        works = await AnalyticsService._works_in_window(db, date_from, date_to)

        total_income = sum(w.paid_amount for w in works)
        total_value = sum(w.total_price for w in works)

        return OverviewStats(
            total_clients=len(clients),
            total_works=len(works),
            total_income=total_income,
            total_due=total_value - total_income,
            total_value=total_value,
            payment_breakdown=PaymentBreakdown(
                paid=sum(1 for w in works if w.payment_status == PaymentStatus.PAID),
                partial=sum(1 for w in works if w.payment_status == PaymentStatus.PARTIAL),
                unpaid=sum(1 for w in works if w.payment_status == PaymentStatus.UNPAID),
            ),
            client_balance_breakdown=ClientBalanceBreakdown(
                positive=sum(1 for c in clients if c.balance > 0),
                negative=sum(1 for c in clients if c.balance < 0),
                zero=sum(1 for c in clients if c.balance == 0),
            ),
        )

    @staticmethod
    async def get_income(
        db: AsyncSession,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        group_by: Optional[str] = None,
    ) -> IncomeAnalytics:
        """Income totals, optionally grouped by "month" or "work_type"."""
        works = await AnalyticsService._works_in_window(db, date_from, date_to)

        if group_by == "month":
            months: Dict[str, MonthlyIncome] = {}
            for work in works:
                key = month_key(work.transaction_date)
                _add_to_bucket(months.setdefault(key, MonthlyIncome(month=key)), work)
            monthly = sorted(months.values(), key=lambda m: month_sort_key(m.month))
            return IncomeAnalytics(monthly_data=monthly)

        if group_by == "work_type":
            types: Dict[str, WorkTypeIncome] = {}
            for work in works:
                for work_type in work.work_types or []:
                    _add_to_bucket(types.setdefault(work_type, WorkTypeIncome(work_type=work_type)), work)
            by_type = sorted(types.values(), key=lambda t: t.income, reverse=True)
            return IncomeAnalytics(work_type_data=by_type)

        overall = IncomeBucket()
        for work in works:
            _add_to_bucket(overall, work)
        return IncomeAnalytics(overall=overall)

    @staticmethod
    async def get_client_analytics(
        db: AsyncSession,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: int = 10,
    ) -> ClientAnalytics:
        """Best clients by income in the window and client spread across work types."""
        clients = await AnalyticsService._clients(db)
        works = await AnalyticsService._works_in_window(db, date_from, date_to)

        performance = {
            c.id: ClientPerformance(
                client_id=c.id,
                client_name=c.name,
                current_balance=c.balance,
                work_types=list(c.work_types or []),
            )
            for c in clients
        }
        for work in works:
            row = performance.get(work.client_id)
            if row is None:
                continue
            row.total_income += work.paid_amount
            row.total_due += work.total_price - work.paid_amount
            row.total_value += work.total_price
            row.work_count += 1

        active = sorted(
            (row for row in performance.values() if row.work_count > 0),
            key=lambda row: row.total_income,
            reverse=True,
        )

        distribution: Dict[str, int] = {}
        for client in clients:
            for work_type in client.work_types or []:
                distribution[work_type] = distribution.get(work_type, 0) + 1

        return ClientAnalytics(
            top_clients=active[:limit],
            all_client_data=active,
            work_type_distribution=sorted(
                (WorkTypeCount(work_type=k, count=v) for k, v in distribution.items()),
                key=lambda item: item.count,
                reverse=True,
            ),
            total_active_clients=len(active),
        )

    @staticmethod
    async def get_service_analytics(
        db: AsyncSession, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> ServiceAnalytics:
        """Per work type performance and monthly income trend."""
        works = await AnalyticsService._works_in_window(db, date_from, date_to)

        services: Dict[str, ServicePerformance] = {}
        trends: Dict[str, Dict[str, int]] = {}

        for work in works:
            key = month_key(work.transaction_date)
            for work_type in work.work_types or []:
                service = services.setdefault(work_type, ServicePerformance(work_type=work_type))
                service.total_income += work.paid_amount
                service.total_due += work.total_price - work.paid_amount
                service.total_value += work.total_price
                service.work_count += 1
                if work.payment_status == PaymentStatus.PAID:
                    service.paid_count += 1
                elif work.payment_status == PaymentStatus.PARTIAL:
                    service.partial_count += 1
                else:
                    service.unpaid_count += 1

                monthly = trends.setdefault(work_type, {})
                monthly[key] = monthly.get(key, 0) + work.paid_amount

        for service in services.values():
            service.average_value = service.total_value / service.work_count if service.work_count else 0.0

        ranked = sorted(services.values(), key=lambda s: s.total_income, reverse=True)
        return ServiceAnalytics(
            service_performance=ranked,
            service_trends=trends,
            total_services=len(ranked),
        )

    @staticmethod
    async def get_payment_analytics(
        db: AsyncSession, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> PaymentAnalytics:
        """Collection efficiency, outstanding money and monthly collection trend."""
        works = await AnalyticsService._works_in_window(db, date_from, date_to)

        total_value = sum(w.total_price for w in works)
        total_paid = sum(w.paid_amount for w in works)

        paid, partial, unpaid = StatusValue(), PartialStatusValue(), StatusValue()
        months: Dict[str, MonthlyCollection] = {}
        outstanding: Dict[str, OutstandingByWorkType] = {}

        for work in works:
            if work.payment_status == PaymentStatus.PAID:
                bucket = paid
            elif work.payment_status == PaymentStatus.PARTIAL:
                bucket = partial
                partial.paid += work.paid_amount
            else:
                bucket = unpaid
            bucket.count += 1
            bucket.value += work.total_price

            key = month_key(work.transaction_date)
            month = months.setdefault(key, MonthlyCollection(month=key))
            month.total_value += work.total_price
            month.total_paid += work.paid_amount
            month.total_due += work.total_price - work.paid_amount
            month.work_count += 1

            due = work.total_price - work.paid_amount
            if due > 0:
                for work_type in work.work_types or []:
                    item = outstanding.setdefault(work_type, OutstandingByWorkType(work_type=work_type))
                    item.total_due += due
                    item.work_count += 1

        for month in months.values():
            month.efficiency = _percent(month.total_paid, month.total_value)
        for item in outstanding.values():
            item.average_due = item.total_due / item.work_count if item.work_count else 0.0

        return PaymentAnalytics(
            overview=PaymentOverview(
                total_value=total_value,
                total_paid=total_paid,
                total_due=total_value - total_paid,
                collection_efficiency=_percent(total_paid, total_value),
                total_works=len(works),
            ),
            payment_status_breakdown=PaymentStatusBreakdown(paid=paid, partial=partial, unpaid=unpaid),
            monthly_collection=sorted(months.values(), key=lambda m: month_sort_key(m.month)),
            outstanding_by_work_type=sorted(outstanding.values(), key=lambda i: i.total_due, reverse=True),
        )
