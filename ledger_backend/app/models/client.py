"""
Client database model.

A client owns work transactions and balance history entries. The balance is
maintained by the balance ledger, never written directly by client CRUD.
"""

from sqlalchemy import Column, Integer, BigInteger, String, DateTime, JSON
from ledger_backend.app.core.dates import utcnow
from ledger_backend.app.db.session import Base


class Client(Base):
    """
    Client model.

    balance > 0: client owes the business.
    balance < 0: business owes the client.
    """
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Identity / contact
    name = Column(String(100), nullable=False, index=True)
    date_of_birth = Column(String(10), nullable=False)  # DD/MM/YYYY
    address = Column(String(500), nullable=False)
    phone = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)
    pan_number = Column(String(10), nullable=True, unique=True)
    aadhar_number = Column(String(20), nullable=True, unique=True)

    # Usual work types (list of WorkType values)
    work_types = Column(JSON, nullable=False, default=list)

    # Running balance in paise
    balance = Column(BigInteger, nullable=False, default=0, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}', balance={self.balance})>"
