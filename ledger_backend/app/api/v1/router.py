"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from ledger_backend.app.api.v1.endpoints import (
    auth, clients, works, analytics, admin
)

router = APIRouter()

# Principal
router.include_router(auth.router)

# Client directory and balance views
router.include_router(clients.router)

# Work transactions
router.include_router(works.router)

# Dashboards
router.include_router(analytics.router)

# Maintenance
router.include_router(admin.router)
