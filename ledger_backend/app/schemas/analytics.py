"""
Analytics Schemas.

All monetary fields are integers in paise; ratios are floats.
"""

from pydantic import BaseModel
from typing import List, Optional, Dict


class PaymentBreakdown(BaseModel):
    paid: int
    partial: int
    unpaid: int


class ClientBalanceBreakdown(BaseModel):
    positive: int
    negative: int
    zero: int


class OverviewStats(BaseModel):
    """Dashboard headline numbers."""
    total_clients: int
    total_works: int
    total_income: int
    total_due: int
    total_value: int
    payment_breakdown: PaymentBreakdown
    client_balance_breakdown: ClientBalanceBreakdown


class IncomeBucket(BaseModel):
    income: int = 0
    due: int = 0
    total: int = 0
    count: int = 0


class MonthlyIncome(IncomeBucket):
    month: str  # MM/YYYY


class WorkTypeIncome(IncomeBucket):
    work_type: str


class IncomeAnalytics(BaseModel):
    """Exactly one of the three views is populated, depending on group_by."""
    overall: Optional[IncomeBucket] = None
    monthly_data: Optional[List[MonthlyIncome]] = None
    work_type_data: Optional[List[WorkTypeIncome]] = None


class ClientPerformance(BaseModel):
    client_id: int
    client_name: str
    total_income: int = 0
    total_due: int = 0
    total_value: int = 0
    work_count: int = 0
    current_balance: int
    work_types: List[str]


class WorkTypeCount(BaseModel):
    work_type: str
    count: int


class ClientAnalytics(BaseModel):
    top_clients: List[ClientPerformance]
    all_client_data: List[ClientPerformance]
    work_type_distribution: List[WorkTypeCount]
    total_active_clients: int


class ServicePerformance(BaseModel):
    work_type: str
    total_income: int = 0
    total_due: int = 0
    total_value: int = 0
    work_count: int = 0
    average_value: float = 0.0
    paid_count: int = 0
    partial_count: int = 0
    unpaid_count: int = 0


class ServiceAnalytics(BaseModel):
    service_performance: List[ServicePerformance]
    service_trends: Dict[str, Dict[str, int]]  # work type -> MM/YYYY -> income
    total_services: int


class PaymentOverview(BaseModel):
    total_value: int
    total_paid: int
    total_due: int
    collection_efficiency: float  # percent
    total_works: int


class StatusValue(BaseModel):
    count: int = 0
    value: int = 0


class PartialStatusValue(StatusValue):
    paid: int = 0


class PaymentStatusBreakdown(BaseModel):
    paid: StatusValue
    partial: PartialStatusValue
    unpaid: StatusValue


class MonthlyCollection(BaseModel):
    month: str
    total_value: int = 0
    total_paid: int = 0
    total_due: int = 0
    efficiency: float = 0.0
    work_count: int = 0


class OutstandingByWorkType(BaseModel):
    work_type: str
    total_due: int = 0
    work_count: int = 0
    average_due: float = 0.0


class PaymentAnalytics(BaseModel):
    overview: PaymentOverview
    payment_status_breakdown: PaymentStatusBreakdown
    monthly_collection: List[MonthlyCollection]
    outstanding_by_work_type: List[OutstandingByWorkType]
