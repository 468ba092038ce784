"""Domain models for the reconciliation access boundary.

Re-exports the enums and value types so callers can use
``from src.core.models import X``.
"""

from src.core.models.auth import Principal, UserRole, parse_role
from src.core.models.exception import ExceptionStatus, ExceptionType

__all__ = [
    "ExceptionStatus",
    "ExceptionType",
    "Principal",
    "UserRole",
    "parse_role",
]
