"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. A TagBlaze
access token is a three-part HS256 JWT with claims:

    sub   user id (string form of the integer id)
    role  "agent" | "admin"
    iat   issued-at (unix seconds)
    exp   expiry (unix seconds)

TokenSigner holds the secret, algorithm and TTL. It is built once at
startup from Settings and handed to the Authenticator explicitly, so tests
can run with their own secret and a fake clock. Verification is pure CPU
work with no shared mutable state — safe to call concurrently.

Expiry is checked here against the signer's clock (now >= exp → expired)
after the signature has been verified by PyJWT.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from tagblaze.auth.roles import Role
from tagblaze.errors import TokenExpired, TokenInvalid

REQUIRED_CLAIMS = ["sub", "role", "iat", "exp"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: Role
    issued_at: datetime
    expires_at: datetime


class TokenSigner:
    """Issues and verifies signed bearer tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self.clock = clock or _utcnow

    @classmethod
    def from_settings(cls, settings) -> "TokenSigner":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
        )

    def issue(self, user_id: int, role: Role) -> str:
        """Create a signed access token for a user."""
        now = self.clock()
        payload = {
            "sub": str(user_id),
            "role": Role(role).value,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify signature, structure and expiry.

        Raises:
            TokenInvalid: bad signature, malformed token or claims
            TokenExpired: signature fine but now >= exp
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False, "require": REQUIRED_CLAIMS},
            )
        except jwt.InvalidTokenError as e:
            raise TokenInvalid(f"Invalid token: {e}")

        try:
            user_id = int(payload["sub"])
            role = Role(payload["role"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (TypeError, ValueError):
            raise TokenInvalid("Invalid token: malformed claims")

        if self.clock() >= expires_at:
            raise TokenExpired("Token has expired")

        return TokenClaims(
            user_id=user_id,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )
