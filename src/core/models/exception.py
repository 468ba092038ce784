"""Reconciliation exception enums: ExceptionType and ExceptionStatus.

Exception records themselves are produced and stored by the reconciliation
engine; only their category tag and lifecycle state are modelled here.
"""

from __future__ import annotations

import enum


class ExceptionType(enum.StrEnum):
    """Discrepancy categories emitted by the reconciliation engine."""

    MISSING_SOURCE = "MISSING_SOURCE"
    MISSING_TARGET = "MISSING_TARGET"
    VALUE_MISMATCH = "VALUE_MISMATCH"
    DUPLICATE = "DUPLICATE"
    FORMAT_ERROR = "FORMAT_ERROR"
    TOLERANCE_EXCEEDED = "TOLERANCE_EXCEEDED"
    POTENTIAL_MATCH = "POTENTIAL_MATCH"


class ExceptionStatus(enum.StrEnum):
    """Review lifecycle states an action may move an exception into."""

    OPEN = "OPEN"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    IN_REVIEW = "IN_REVIEW"
    RESOLVED = "RESOLVED"
    IGNORED = "IGNORED"
