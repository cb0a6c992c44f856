"""
Work transaction Pydantic schemas.

Amounts are plain integers (paise). Their sign is checked by the work service
so negative amounts surface as InvalidAmount errors rather than 422s.
"""

from pydantic import BaseModel, Field, AfterValidator, field_validator
from datetime import datetime
from typing import Optional, List, Annotated
from ledger_backend.app.core.dates import parse_ddmmyyyy
from ledger_backend.app.models.ledger_enums import WorkType, PaymentStatus


def _unique_work_types(value: Optional[List[WorkType]]) -> Optional[List[WorkType]]:
    if value is None:
        return value
    if not value:
        raise ValueError("At least one work type is required")
    return list(dict.fromkeys(value))


def _valid_transaction_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    parse_ddmmyyyy(value)
    return value


WorkTypeList = Annotated[List[WorkType], AfterValidator(_unique_work_types)]
TransactionDate = Annotated[str, AfterValidator(_valid_transaction_date)]


class WorkCreate(BaseModel):
    """Schema for creating a work transaction."""
    client_id: int
    transaction_date: TransactionDate = Field(..., description="DD/MM/YYYY")
    total_price: int = Field(..., description="Total price in paise")
    paid_amount: int = Field(0, description="Paid amount in paise")
    work_types: WorkTypeList
    description: str = Field(..., min_length=1, max_length=500)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description cannot be blank")
        return value


class WorkUpdate(BaseModel):
    """Schema for updating a work transaction; omitted fields keep their value."""
    client_id: Optional[int] = None
    transaction_date: Optional[TransactionDate] = None
    total_price: Optional[int] = None
    paid_amount: Optional[int] = None
    work_types: Optional[WorkTypeList] = None
    description: Optional[str] = Field(None, min_length=1, max_length=500)

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Description cannot be blank")
        return value


class PaymentCreate(BaseModel):
    """Schema for recording a payment against a work transaction."""
    amount: int = Field(..., description="Amount received in paise")


class WorkResponse(BaseModel):
    """Schema for work response."""
    id: int
    client_id: int
    transaction_date: str
    total_price: int
    paid_amount: int
    work_types: List[WorkType]
    description: str
    payment_status: PaymentStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WorkIdResponse(BaseModel):
    """Identifier of the work a mutation touched."""
    id: int


class WorkStatsResponse(BaseModel):
    """Aggregate over every work transaction."""
    total_works: int
    total_income: int
    total_due: int
    total_value: int
    paid_works: int
    partial_works: int
    unpaid_works: int
