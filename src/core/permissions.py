"""Exception-type access control for reconciliation exceptions.

Defines the permission matrix that decides which roles may act on each
category of reconciliation exception, plus the FastAPI dependencies used
to enforce it server-side.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from fastapi import Depends, HTTPException, status

from src.core.auth import get_current_principal
from src.core.errors import get_safe_error_message_by_status
from src.core.models import ExceptionType, Principal, UserRole

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Permission matrix
# ---------------------------------------------------------------------------

EXCEPTION_ROLE_MAP: Mapping[ExceptionType, frozenset[UserRole]] = MappingProxyType(
    {
        ExceptionType.MISSING_SOURCE: frozenset({UserRole.ADMIN, UserRole.ANALYST, UserRole.IT_ADMIN}),
        ExceptionType.MISSING_TARGET: frozenset({UserRole.ADMIN, UserRole.ANALYST, UserRole.IT_ADMIN}),
        ExceptionType.VALUE_MISMATCH: frozenset({UserRole.ADMIN, UserRole.ANALYST, UserRole.FINANCE}),
        ExceptionType.DUPLICATE: frozenset(
            {UserRole.ADMIN, UserRole.ANALYST, UserRole.OPERATIONS, UserRole.COMPLIANCE}
        ),
        ExceptionType.FORMAT_ERROR: frozenset({UserRole.ADMIN, UserRole.ANALYST, UserRole.IT_ADMIN}),
        ExceptionType.TOLERANCE_EXCEEDED: frozenset(
            {UserRole.ADMIN, UserRole.ANALYST, UserRole.FINANCE, UserRole.COMPLIANCE}
        ),
        ExceptionType.POTENTIAL_MATCH: frozenset({UserRole.ADMIN, UserRole.ANALYST, UserRole.OPERATIONS}),
    }
)


def _assert_matrix_complete(matrix: Mapping[ExceptionType, frozenset[UserRole]]) -> None:
    """Fail at import if any exception type lacks an explicit, non-empty row."""
    missing = [t.value for t in ExceptionType if not matrix.get(t)]
    if missing:
        raise RuntimeError(f"Permission matrix has no roles for exception types: {', '.join(missing)}")


_assert_matrix_complete(EXCEPTION_ROLE_MAP)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def authorized_roles(exception_type: Any) -> frozenset[UserRole]:
    """Return the roles allowed to act on an exception type (empty if unknown)."""
    try:
        return EXCEPTION_ROLE_MAP.get(exception_type, frozenset())
    except Exception:  # Intentionally broad: unhashable or hostile input is never authorized
        return frozenset()


def can_action_exception(role: Any, exception_type: Any) -> bool:
    """Check if a role may act on exceptions of the given type.

    Unknown roles and exception types are never authorized.

    Args:
        role: The caller's role.
        exception_type: The exception category being acted on.

    Returns:
        True if the matrix row for the type contains the role.
    """
    allowed = authorized_roles(exception_type)
    try:
        return role in allowed
    except Exception:  # Intentionally broad: unhashable or hostile input is never authorized
        return False


def actionable_exception_types(role: Any) -> frozenset[ExceptionType]:
    """Inverse view of the matrix: every exception type the role may act on."""
    return frozenset(t for t, roles in EXCEPTION_ROLE_MAP.items() if can_action_exception(role, t))


# ---------------------------------------------------------------------------
# Server-side enforcement
# ---------------------------------------------------------------------------


def ensure_can_action(principal: Principal, exception_types: Iterable[ExceptionType]) -> None:
    """Raise 403 unless the principal may act on every given exception type.

    The response detail is the same fixed message for every denial so it
    never reveals which role or type was at fault.

    Raises:
        HTTPException 403: If any type is not actionable for the role.
    """
    for exception_type in exception_types:
        if not can_action_exception(principal.role, exception_type):
            logger.warning(
                "Denied exception action: subject=%s role=%s type=%s",
                principal.subject,
                principal.role,
                exception_type,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=get_safe_error_message_by_status(status.HTTP_403_FORBIDDEN),
            )


def require_exception_action(exception_type: ExceptionType) -> Any:
    """Create a FastAPI dependency that checks the exception-type matrix.

    Usage:
        @router.post("/duplicates/merge", dependencies=[Depends(require_exception_action(ExceptionType.DUPLICATE))])

    Args:
        exception_type: The exception category the route acts on.

    Returns:
        A FastAPI dependency callable.
    """

    async def _check(principal: Principal = Depends(get_current_principal)) -> Principal:
        ensure_can_action(principal, [exception_type])
        return principal

    return _check
