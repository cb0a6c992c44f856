"""
Client Pydantic schemas.

Field rules follow the business's Indian client records: mobile numbers,
PAN (AAAAA9999A) and 12-digit Aadhar numbers. Phone and Aadhar are stored
without separators so uniqueness checks compare like with like.
"""

import re
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
from ledger_backend.app.core.dates import parse_ddmmyyyy
from ledger_backend.app.models.ledger_enums import WorkType

PHONE_PATTERN = re.compile(r"^(91)?[6-9][0-9]{9}$")
PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
AADHAR_PATTERN = re.compile(r"^[0-9]{12}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ClientBase(BaseModel):
    name: str
    date_of_birth: str = Field(..., description="DD/MM/YYYY")
    address: str
    phone: str
    email: Optional[str] = None
    pan_number: Optional[str] = None
    aadhar_number: Optional[str] = None
    work_types: List[WorkType] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not 2 <= len(value) <= 100:
            raise ValueError("Name must be between 2 and 100 characters")
        return value

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, value: str) -> str:
        if parse_ddmmyyyy(value).year < 1900:
            raise ValueError("Date of birth must be after 1900")
        return value

    @field_validator("address")
    @classmethod
    def validate_address(cls, value: str) -> str:
        value = value.strip()
        if not 10 <= len(value) <= 500:
            raise ValueError("Address must be between 10 and 500 characters")
        return value

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        value = re.sub(r"[\s\-+]", "", value)
        if not PHONE_PATTERN.match(value):
            raise ValueError("Phone number must be a valid Indian mobile number")
        # Stored as the 10-digit national number
        return value[-10:]

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        if not value or not value.strip():
            return None
        value = value.strip()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Email must be a valid email address")
        return value

    @field_validator("pan_number")
    @classmethod
    def validate_pan(cls, value: Optional[str]) -> Optional[str]:
        if not value or not value.strip():
            return None
        value = value.strip().upper()
        if not PAN_PATTERN.match(value):
            raise ValueError("PAN must be in format AAAAA9999A")
        return value

    @field_validator("aadhar_number")
    @classmethod
    def validate_aadhar(cls, value: Optional[str]) -> Optional[str]:
        if not value or not value.strip():
            return None
        value = re.sub(r"[\s-]", "", value)
        if not AADHAR_PATTERN.match(value):
            raise ValueError("Aadhar must be 12 digits")
        return value

    @field_validator("work_types")
    @classmethod
    def unique_work_types(cls, value: List[WorkType]) -> List[WorkType]:
        return list(dict.fromkeys(value))


class ClientCreate(ClientBase):
    """Schema for creating a client. Balance always starts at zero."""


class ClientUpdate(ClientBase):
    """Schema for replacing a client's details. Balance is not editable here."""


class ClientResponse(BaseModel):
    """Schema for client response."""
    id: int
    name: str
    date_of_birth: str
    address: str
    phone: str
    email: Optional[str]
    pan_number: Optional[str]
    aadhar_number: Optional[str]
    work_types: List[WorkType]
    balance: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClientListResponse(BaseModel):
    """Schema for paginated client list."""
    clients: List[ClientResponse]
    total: int
    has_more: bool


class BalanceAdjustmentCreate(BaseModel):
    """Explicit balance adjustment (e.g. an opening balance)."""
    amount: int = Field(..., description="Signed change in paise; positive means the client owes more")
    description: Optional[str] = Field(None, max_length=500)


class BalanceConsistencyResponse(BaseModel):
    client_id: int
    stored_balance: int
    calculated_balance: int
    is_consistent: bool
    difference: int


class BalanceFixResponse(BaseModel):
    client_id: int
    client_name: str
    old_balance: int
    new_balance: int
    difference: int
