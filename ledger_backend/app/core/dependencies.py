"""
Principal resolution dependencies for FastAPI.

Endpoints depend on `get_current_principal`, which asks the configured
resolver who the caller is. The static resolver always answers with the demo
principal; the JWT resolver requires a valid Bearer token.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from ledger_backend.app.core.config import settings
from ledger_backend.app.core.exceptions import AuthenticationError
from ledger_backend.app.core.jwt import decode_access_token
from ledger_backend.app.schemas.auth import Principal, DEMO_PRINCIPAL

# auto_error is off so the static resolver works without an Authorization header
security = HTTPBearer(auto_error=False)


class PrincipalResolver:
    """Capability: resolve the current principal from request credentials."""

    def resolve(self, credentials: Optional[HTTPAuthorizationCredentials]) -> Principal:
        raise NotImplementedError


class StaticPrincipalResolver(PrincipalResolver):
    """Placeholder resolver returning a fixed identity."""

    def __init__(self, principal: Principal = DEMO_PRINCIPAL):
        self.principal = principal

    def resolve(self, credentials: Optional[HTTPAuthorizationCredentials]) -> Principal:
        return self.principal


class JWTPrincipalResolver(PrincipalResolver):
    """Resolves the principal from a signed Bearer token."""

    def resolve(self, credentials: Optional[HTTPAuthorizationCredentials]) -> Principal:
        if credentials is None:
            raise AuthenticationError("Missing bearer token")

        payload = decode_access_token(credentials.credentials)
        if payload is None:
            raise AuthenticationError("Could not validate credentials")

        principal_id = payload.get("user_id") or payload.get("sub")
        if not principal_id:
            raise AuthenticationError("Invalid token payload")

        return Principal(
            id=str(principal_id),
            name=payload.get("name") or payload.get("sub") or str(principal_id),
            email=payload.get("email"),
            authenticated=True,
        )


def get_principal_resolver() -> PrincipalResolver:
    if settings.auth_mode == "jwt":
        return JWTPrincipalResolver()
    return StaticPrincipalResolver()


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    resolver: PrincipalResolver = Depends(get_principal_resolver),
) -> Principal:
    """
    FastAPI dependency returning the caller's principal.

    Raises:
        AuthenticationError: 401 when the configured resolver rejects the credentials
    """
    return resolver.resolve(credentials)
