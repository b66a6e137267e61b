"""Roles and the role comparison used by the authorization guard.

Learn: Two roles, ordered by rank. admin can do everything an agent can,
so a route that requires `agent` admits both, and a route that requires
`admin` admits only admins. The comparison is a plain function over the
enum rather than a class hierarchy — role semantics stay independent of
the user entity.
"""

import enum

from tagblaze.errors import Forbidden, ValidationError


class Role(str, enum.Enum):
    AGENT = "agent"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _RANK[self]


_RANK = {Role.AGENT: 1, Role.ADMIN: 2}


def parse_role(value: str) -> Role:
    """Convert a raw string to a Role, or raise ValidationError."""
    try:
        return Role(value)
    except ValueError:
        allowed = ", ".join(r.value for r in Role)
        raise ValidationError(f"Unknown role '{value}'. Allowed: {allowed}")


def satisfies(actual: Role, required: Role) -> bool:
    """True if a holder of `actual` may perform an operation requiring `required`."""
    return actual.rank >= required.rank


def check_role(actual: Role, required: Role) -> None:
    """Raise Forbidden unless `actual` satisfies `required`."""
    if not satisfies(actual, required):
        raise Forbidden(f"Requires role '{required.value}'")
