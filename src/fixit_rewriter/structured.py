"""Typed payloads that describe diagnostics and the fix-it hints they carry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

HintKind = Literal["insert", "remove", "replace"]


class Severity(str, Enum):
    """Ordered classification of a reported problem."""

    IGNORED = "IGNORED"
    NOTE = "NOTE"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @property
    def is_error(self) -> bool:
        """Return True for severities whose unfixable problems block output."""
        return self in (Severity.ERROR, Severity.FATAL)

    @classmethod
    def parse(cls, value: "Severity | str") -> "Severity":
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as error:
            valid = ", ".join(item.value.lower() for item in cls)
            raise ValueError(f"Unknown severity '{value}'. Expected one of: {valid}") from error


_SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.IGNORED,
    Severity.NOTE,
    Severity.WARNING,
    Severity.ERROR,
    Severity.FATAL,
)


@dataclass(frozen=True, slots=True)
class SourceRange:
    """Half-open ``[begin, end)`` span of offsets into the original text."""

    begin: int
    end: int

    @property
    def is_well_formed(self) -> bool:
        return self.begin <= self.end

    @property
    def length(self) -> int:
        return self.end - self.begin


@dataclass(frozen=True, slots=True)
class FixItHint:
    """Single insertion, removal or replacement suggested alongside a diagnostic."""

    remove_range: SourceRange | None = None
    insertion_location: int | None = None
    code_to_insert: str = ""

    def __post_init__(self) -> None:
        if self.remove_range is None and self.insertion_location is None:
            raise ValueError("Fix-it hint needs either a range to remove or an insertion location.")
        if self.remove_range is not None and self.insertion_location is not None:
            raise ValueError("Fix-it hint cannot carry both a range and an insertion location.")

    @classmethod
    def insertion(cls, location: int, text: str) -> "FixItHint":
        return cls(insertion_location=location, code_to_insert=text)

    @classmethod
    def removal(cls, begin: int, end: int) -> "FixItHint":
        return cls(remove_range=SourceRange(begin, end))

    @classmethod
    def replacement(cls, begin: int, end: int, text: str) -> "FixItHint":
        return cls(remove_range=SourceRange(begin, end), code_to_insert=text)

    @property
    def kind(self) -> HintKind:
        if self.remove_range is None:
            return "insert"
        if not self.code_to_insert:
            return "remove"
        return "replace"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Reported problem together with the fix-it hints attached to it."""

    severity: Severity
    message: str = ""
    fixits: tuple[FixItHint, ...] = ()

    @property
    def has_fixits(self) -> bool:
        return bool(self.fixits)
