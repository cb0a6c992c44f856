"""
Date helpers.

Transaction dates and dates of birth are persisted as DD/MM/YYYY strings;
creation timestamps used for ordering are timezone-aware UTC datetimes.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional

DATE_FORMAT = "%d/%m/%Y"
_DATE_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_ddmmyyyy(value: str) -> date:
    """Parse a DD/MM/YYYY string; raises ValueError when malformed or not a real date."""
    if not _DATE_PATTERN.match(value or ""):
        raise ValueError("Date must be in DD/MM/YYYY format")
    return datetime.strptime(value, DATE_FORMAT).date()


def format_ddmmyyyy(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def month_key(value: str) -> str:
    """MM/YYYY bucket for a DD/MM/YYYY date."""
    _, month, year = value.split("/")
    return f"{month}/{year}"


def month_sort_key(key: str) -> tuple:
    month, year = key.split("/")
    return int(year), int(month)


def in_date_range(value: str, date_from: Optional[str] = None, date_to: Optional[str] = None) -> bool:
    """
    Inclusive DD/MM/YYYY range check.

    With no bounds everything matches; a missing lower bound is open and a
    missing upper bound defaults to today.
    """
    if not date_from and not date_to:
        return True
    current = parse_ddmmyyyy(value)
    lower = parse_ddmmyyyy(date_from) if date_from else date.min
    upper = parse_ddmmyyyy(date_to) if date_to else date.today()
    return lower <= current <= upper
