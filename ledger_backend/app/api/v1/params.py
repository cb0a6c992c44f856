"""
Shared query parameters for v1 endpoints.
"""

from dataclasses import dataclass
from typing import Optional
from fastapi import HTTPException, Query, status
from ledger_backend.app.core.dates import parse_ddmmyyyy


@dataclass
class DateWindow:
    date_from: Optional[str] = None
    date_to: Optional[str] = None


def date_window(
    date_from: Optional[str] = Query(None, description="Inclusive lower bound, DD/MM/YYYY"),
    date_to: Optional[str] = Query(None, description="Inclusive upper bound, DD/MM/YYYY"),
) -> DateWindow:
    """Validate an optional DD/MM/YYYY window on transaction dates."""
    for name, value in (("date_from", date_from), ("date_to", date_to)):
        if value is None:
            continue
        try:
            parse_ddmmyyyy(value)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{name} must be a valid DD/MM/YYYY date",
            )
    return DateWindow(date_from=date_from, date_to=date_to)
