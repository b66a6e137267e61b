"""Authenticator — registration, login and token verification.

Learn: Service layer separates business logic from HTTP routing. The
Authenticator owns the credential store (users table) and the token
signer; the HTTP layer and the authorization guard only call it.

Atomic registration: the email pre-check gives a friendly fast path, but
the store's UNIQUE(email) constraint is what decides a race. Two
concurrent registrations with the same email both pass the pre-check,
one INSERT commits, the other hits IntegrityError → rollback →
DuplicateEmail. Never two rows.
"""

import re
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.auth.jwt import TokenSigner
from tagblaze.auth.password import (
    dummy_verify,
    hash_password,
    password_problem,
    verify_password,
)
from tagblaze.auth.roles import Role, parse_role
from tagblaze.db.models import User
from tagblaze.db.transaction import atomic, reading
from tagblaze.errors import (
    DuplicateEmail,
    InvalidCredentials,
    UserNotFound,
    ValidationError,
)

logger = structlog.get_logger()

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CurrentIdentity:
    """The authenticated identity making the request.

    Learn: This is the unified auth context handed to every protected
    route. It carries only what the token asserts (after checking the
    user still exists), never the password hash.
    """

    def __init__(self, user_id: int, role: Role):
        self.user_id = user_id
        self.role = role

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id}, role={self.role.value})"


class LoginResult:
    def __init__(self, access_token: str, expires_in: int, user: User):
        self.access_token = access_token
        self.expires_in = expires_in
        self.user = user


class Authenticator:
    """Business logic for credentials and bearer tokens."""

    def __init__(self, db: AsyncSession, signer: TokenSigner, bcrypt_rounds: int = 12):
        self.db = db
        self.signer = signer
        self.bcrypt_rounds = bcrypt_rounds

    # ─── Register ───────────────────────────────────────

    async def register(
        self,
        email: str,
        name: str,
        password: str,
        role: str = Role.AGENT.value,
    ) -> User:
        """Create a user account. Returns the stored user.

        Raises:
            ValidationError: bad email format, empty name, weak password, unknown role
            DuplicateEmail: the (case-insensitive) email is already registered
        """
        email = normalize_email(email or "")
        if not EMAIL_RE.match(email):
            raise ValidationError("Invalid email address")
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name must not be empty")
        problem = password_problem(password)
        if problem:
            raise ValidationError(problem)
        parsed_role = parse_role(role)

        async with reading(self.db):
            existing = await self._find_by_email(email)
        if existing:
            raise DuplicateEmail("Email already registered")

        user = User(
            email=email,
            name=name,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
            role=parsed_role.value,
        )
        async with atomic(
            self.db, on_conflict=lambda e: DuplicateEmail("Email already registered")
        ):
            self.db.add(user)
            await self.db.flush()
            await self.db.refresh(user)

        logger.info("auth.registered", user_id=user.id, role=user.role)
        return user

    # ─── Login ──────────────────────────────────────────

    async def login(self, email: str, password: str) -> LoginResult:
        """Email + password → signed access token.

        Unknown email and wrong password raise the same InvalidCredentials.
        """
        async with reading(self.db):
            user = await self._find_by_email(normalize_email(email or ""))

        if user is None:
            dummy_verify(password or "", rounds=self.bcrypt_rounds)
            logger.info("auth.login_failed")
            raise InvalidCredentials()

        if not verify_password(password or "", user.password_hash):
            logger.info("auth.login_failed")
            raise InvalidCredentials()

        token = self.signer.issue(user.id, Role(user.role))
        logger.info("auth.login", user_id=user.id)
        return LoginResult(
            access_token=token,
            expires_in=int(self.signer.ttl.total_seconds()),
            user=user,
        )

    # ─── Verify ─────────────────────────────────────────

    async def verify(self, token: str) -> CurrentIdentity:
        """Bearer token → identity.

        Raises:
            TokenInvalid: bad signature / malformed token
            TokenExpired: past expiry
            UserNotFound: subject no longer exists (a TokenInvalid)
        """
        claims = self.signer.verify(token)
        async with reading(self.db):
            user = await self.db.get(User, claims.user_id)
        if user is None:
            raise UserNotFound("Invalid token: user no longer exists")
        return CurrentIdentity(user_id=claims.user_id, role=claims.role)

    # ─── Users ──────────────────────────────────────────

    async def get_user(self, user_id: int) -> Optional[User]:
        async with reading(self.db):
            return await self.db.get(User, user_id)

    async def list_users(self) -> list[User]:
        async with reading(self.db):
            result = await self.db.execute(select(User).order_by(User.id))
            return list(result.scalars().all())

    async def _find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()
