"""
Balance history database model.

Immutable audit trail of client balance transitions.
"""

from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Enum, Index
from ledger_backend.app.core.dates import utcnow
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.ledger_enums import BalanceChangeType


class BalanceHistory(Base):
    """
    Balance history entry.

    balance_change == new_balance - previous_balance.
    NO updates allowed; rows are only removed by retention pruning.
    client_id and work_id are weak references: the client or work may have
    been deleted since.
    """
    __tablename__ = "balance_history"
    __table_args__ = (
        Index("ix_balance_history_client_created", "client_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Linkage
    client_id = Column(Integer, nullable=False, index=True)
    work_id = Column(Integer, nullable=True, index=True)

    # Transition
    previous_balance = Column(BigInteger, nullable=False)
    new_balance = Column(BigInteger, nullable=False)
    balance_change = Column(BigInteger, nullable=False)
    change_type = Column(Enum(BalanceChangeType), nullable=False, index=True)
    description = Column(String(500), nullable=False)

    # Timestamp (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return (
            f"<BalanceHistory(id={self.id}, client_id={self.client_id}, "
            f"type='{self.change_type.value}', change={self.balance_change})>"
        )
