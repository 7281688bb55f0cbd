"""Error types and status codes shared by the fix-it rewriting engine."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


class FixItStatus(str, Enum):
    """Structured outcome codes reported by validation, application and output."""

    ADMITTED = "ADMITTED"
    APPLIED = "APPLIED"
    NO_HINTS = "NO_HINTS"
    INVALID_RANGE = "INVALID_RANGE"
    UNADDRESSABLE = "UNADDRESSABLE"
    VALIDATION_REJECTED = "VALIDATION_REJECTED"
    APPLY_FAILED = "APPLY_FAILED"
    OUTPUT_SUPPRESSED = "OUTPUT_SUPPRESSED"
    NO_CHANGES = "NO_CHANGES"
    WRITTEN = "WRITTEN"


class FixItError(RuntimeError):
    """Raised when a rewrite operation cannot be performed."""

    status: FixItStatus = FixItStatus.APPLY_FAILED

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class InvalidRangeError(FixItError):
    """Raised when a range ends before it begins."""

    status = FixItStatus.INVALID_RANGE


class UnaddressableError(FixItError):
    """Raised when an offset or range no longer maps into the rewrite buffer."""

    status = FixItStatus.UNADDRESSABLE


class OutputError(FixItError):
    """Raised when the fixed file cannot be written to its destination."""

    status = FixItStatus.APPLY_FAILED


__all__ = [
    "FixItError",
    "FixItStatus",
    "InvalidRangeError",
    "OutputError",
    "UnaddressableError",
]
