"""Auth models: UserRole enum and the authenticated Principal."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class UserRole(enum.StrEnum):
    """Caller roles issued by the identity provider.

    Closed set: adding a member requires a matching entry in every
    exception-type row of the permission matrix that should admit it.
    """

    ADMIN = "ADMIN"
    ANALYST = "ANALYST"
    IT_ADMIN = "IT_ADMIN"
    FINANCE = "FINANCE"
    OPERATIONS = "OPERATIONS"
    COMPLIANCE = "COMPLIANCE"


def parse_role(value: Any) -> UserRole | None:
    """Coerce an untrusted role claim into a UserRole.

    Returns None for anything outside the enumeration so the caller can
    treat it as unauthorized.
    """
    if isinstance(value, UserRole):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UserRole(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Principal:
    """The authenticated caller for the duration of one request."""

    subject: str
    role: UserRole

    def __repr__(self) -> str:
        return f"<Principal(subject='{self.subject}', role={self.role})>"
