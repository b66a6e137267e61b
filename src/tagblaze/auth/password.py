"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (rounds=12 by default) takes ~100ms per hash on modern
hardware; tests turn it down via TAGBLAZE_BCRYPT_ROUNDS.

dummy_verify() burns the same bcrypt work as a real check. Login calls it
for unknown emails so response time doesn't reveal whether an account exists.
"""

from functools import lru_cache

import bcrypt

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash (constant-time compare)."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=8)
def _dummy_hash(rounds: int) -> bytes:
    return bcrypt.hashpw(b"tagblaze-dummy-password", bcrypt.gensalt(rounds=rounds))


def dummy_verify(password: str, rounds: int = 12) -> None:
    """Spend one bcrypt comparison at `rounds` without a real account."""
    bcrypt.checkpw(password.encode("utf-8")[:72], _dummy_hash(rounds))


def password_problem(password: str) -> str | None:
    """Return why a password fails policy, or None if it passes."""
    if not password:
        return "Password must not be empty"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None
