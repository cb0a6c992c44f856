"""
Ledger enumerations.
"""

import enum


class WorkType(str, enum.Enum):
    """Service categories a client or work transaction can belong to."""
    ONLINE_WORK = "online-work"
    HEALTH_INSURANCE = "health-insurance"
    LIFE_INSURANCE = "life-insurance"
    INCOME_TAX = "income-tax"
    P_TAX = "p-tax"
    MUTUAL_FUNDS = "mutual-funds"
    OTHERS = "others"


class PaymentStatus(str, enum.Enum):
    """Settlement state of a work transaction, derived from its amounts."""
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


class BalanceChangeType(str, enum.Enum):
    """Reason tag recorded on every balance history entry."""
    WORK_CREATED = "work_created"
    WORK_UPDATED = "work_updated"
    WORK_DELETED = "work_deleted"
    PAYMENT_MADE = "payment_made"
    MANUAL_ADJUSTMENT = "manual_adjustment"
    BALANCE_CORRECTION = "balance_correction"  # written by reconciliation


class BalanceType(str, enum.Enum):
    """Sign bucket of a client balance, used for filtering."""
    POSITIVE = "positive"  # client owes the business
    NEGATIVE = "negative"  # business owes the client
    ZERO = "zero"
