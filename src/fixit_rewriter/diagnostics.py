"""On-disk format of the diagnostic stream consumed by the CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .structured import Diagnostic, FixItHint, Severity

__all__ = [
    "DiagnosticRecord",
    "DiagnosticsDocument",
    "DiagnosticsFormatError",
    "FixItRecord",
    "RangeRecord",
    "load_diagnostics",
    "parse_diagnostics",
]


class DiagnosticsFormatError(ValueError):
    """Raised when a diagnostics document cannot be read or validated."""


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class RangeRecord(RecordModel):
    """Half-open offset range; also accepts a ``[begin, end]`` pair."""

    begin: int
    end: int

    @model_validator(mode="before")
    @classmethod
    def _coerce_pair(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ValueError("A range needs exactly two offsets: [begin, end].")
            return {"begin": value[0], "end": value[1]}
        return value


class FixItRecord(RecordModel):
    """One fix-it: exactly one of ``insert_at``, ``remove`` or ``replace``."""

    insert_at: Optional[int] = None
    remove: Optional[RangeRecord] = None
    replace: Optional[RangeRecord] = None
    range: Optional[RangeRecord] = None
    text: str = ""

    @model_validator(mode="after")
    def _check_single_action(self) -> "FixItRecord":
        chosen = [name for name in ("insert_at", "remove", "replace", "range") if getattr(self, name) is not None]
        if len(chosen) != 1:
            raise ValueError("A fix-it needs exactly one of insert_at, remove, replace or range.")
        if self.remove is not None and self.text:
            raise ValueError("A remove fix-it cannot carry text; use replace instead.")
        return self

    def to_hint(self) -> FixItHint:
        if self.insert_at is not None:
            return FixItHint.insertion(self.insert_at, self.text)
        target = self.remove or self.replace or self.range
        assert target is not None
        return FixItHint.replacement(target.begin, target.end, self.text)


class DiagnosticRecord(RecordModel):
    """Serialised diagnostic with its fix-it hints."""

    severity: Severity
    message: str = ""
    fixits: List[FixItRecord] = Field(default_factory=list)

    @field_validator("severity", mode="before")
    @classmethod
    def _parse_severity(cls, value: Any) -> Severity:
        return Severity.parse(value)

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=self.severity,
            message=self.message,
            fixits=tuple(record.to_hint() for record in self.fixits),
        )


class DiagnosticsDocument(RecordModel):
    """Top-level document: optional source name plus ordered diagnostics."""

    source: Optional[str] = None
    diagnostics: List[DiagnosticRecord] = Field(default_factory=list)

    def to_diagnostics(self) -> list[Diagnostic]:
        return [record.to_diagnostic() for record in self.diagnostics]


def parse_diagnostics(payload: Any) -> DiagnosticsDocument:
    """Validate an already-decoded payload into a ``DiagnosticsDocument``."""
    if payload is None:
        payload = {}
    if isinstance(payload, list):
        payload = {"diagnostics": payload}
    try:
        return DiagnosticsDocument.model_validate(payload)
    except ValidationError as error:
        raise DiagnosticsFormatError(f"Diagnostics did not validate: {error}") from error


def load_diagnostics(path: Path | str) -> DiagnosticsDocument:
    """Load a YAML (or JSON) diagnostics document from disk."""
    document_path = Path(path)
    try:
        with document_path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as error:
        raise DiagnosticsFormatError(f"Unable to read diagnostics from {document_path}: {error}") from error
    except yaml.YAMLError as error:
        raise DiagnosticsFormatError(f"Failed to parse diagnostics in {document_path}: {error}") from error
    return parse_diagnostics(payload)
