"""
Principal API Endpoints.
"""

from fastapi import APIRouter, Depends
from ledger_backend.app.core.dependencies import get_current_principal
from ledger_backend.app.schemas.auth import Principal

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", response_model=Principal)
async def get_me(principal: Principal = Depends(get_current_principal)):
    """Return the principal the request is acting as."""
    return principal
