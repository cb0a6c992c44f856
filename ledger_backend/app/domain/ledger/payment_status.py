"""
Payment status rule.

The branch order matters: a zero payment is "unpaid" even when the total is
also zero, because the paid <= 0 check runs first.
"""

from ledger_backend.app.models.ledger_enums import PaymentStatus


def determine_payment_status(total_price: int, paid_amount: int) -> PaymentStatus:
    if paid_amount <= 0:
        return PaymentStatus.UNPAID
    if paid_amount >= total_price:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


def outstanding_amount(total_price: int, paid_amount: int) -> int:
    """Signed amount still owed on a work; negative when overpaid."""
    return total_price - paid_amount
