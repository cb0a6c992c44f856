"""
Principal schemas.
"""

from pydantic import BaseModel
from typing import Optional


class Principal(BaseModel):
    """The identity a request is acting as."""
    id: str
    name: str
    email: Optional[str] = None
    authenticated: bool = True


DEMO_PRINCIPAL = Principal(
    id="demo-user",
    name="Demo User",
    email="demo@example.com",
    authenticated=True,
)
