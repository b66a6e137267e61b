"""FastAPI auth dependencies — the authorization guard.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request.

Each protected route declares the minimum role it needs:

    identity: CurrentIdentity = Depends(require_role(Role.ADMIN))

Guard outcome, in order:
1. No / non-Bearer Authorization header → Unauthorized (401)
2. Token rejected by the Authenticator → TokenExpired / TokenInvalid (401)
3. Role below the requirement → Forbidden (403)
4. Otherwise the verified identity is handed to the route

The guard keeps no state of its own; everything it knows comes from the
token and the Authenticator it calls.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.auth.jwt import TokenSigner
from tagblaze.auth.roles import Role, check_role
from tagblaze.auth.service import Authenticator, CurrentIdentity
from tagblaze.db.engine import get_db
from tagblaze.errors import Unauthorized

__all__ = [
    "CurrentIdentity",
    "bearer_token",
    "get_authenticator",
    "get_current_admin",
    "get_current_user",
    "get_token_signer",
    "require_role",
]


def get_token_signer(request: Request) -> TokenSigner:
    """The process-wide signer built by create_app()."""
    return request.app.state.token_signer


def get_authenticator(
    request: Request,
    db: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
) -> Authenticator:
    return Authenticator(
        db, signer, bcrypt_rounds=request.app.state.settings.bcrypt_rounds
    )


def bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an `Authorization: Bearer <token>` header."""
    if not authorization:
        raise Unauthorized("Authentication required")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Authorization header must be 'Bearer <token>'")
    return token


def require_role(required: Role):
    """Build a dependency that admits identities holding at least `required`."""

    async def guard(
        authorization: Optional[str] = Header(None),
        auth: Authenticator = Depends(get_authenticator),
    ) -> CurrentIdentity:
        identity = await auth.verify(bearer_token(authorization))
        check_role(identity.role, required)
        return identity

    guard.__name__ = f"require_{required.value}"
    return guard


# Any authenticated user (agents and admins)
get_current_user = require_role(Role.AGENT)

# Admins only
get_current_admin = require_role(Role.ADMIN)
