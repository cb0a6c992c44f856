"""
Work transaction database model.

A billable unit of service performed for one client.
"""

from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Enum, ForeignKey, JSON
from ledger_backend.app.core.dates import utcnow
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.ledger_enums import PaymentStatus


class Work(Base):
    """
    Work model.

    Amounts are integers in paise. payment_status is derived from
    (total_price, paid_amount) on every write and never set independently.
    """
    __tablename__ = "works"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Ownership
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)

    # Details
    transaction_date = Column(String(10), nullable=False, index=True)  # DD/MM/YYYY
    work_types = Column(JSON, nullable=False, default=list)
    description = Column(String(500), nullable=False)

    # Financials
    total_price = Column(BigInteger, nullable=False)
    paid_amount = Column(BigInteger, nullable=False, default=0)
    payment_status = Column(Enum(PaymentStatus), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Work(id={self.id}, client_id={self.client_id}, total={self.total_price}, paid={self.paid_amount})>"
