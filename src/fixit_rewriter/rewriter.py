"""Diagnostic consumer that applies fix-it hints while forwarding diagnostics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Protocol, TextIO, runtime_checkable

from .errors import FixItError, FixItStatus
from .structured import Diagnostic, Severity
from .tools.failures import FailureTracker
from .tools.hints import HintApplication, HintValidation, apply_hints, validate_hints
from .tools.output import DEFAULT_OUTPUT_MARKER, STDOUT_MARKER, WriteResult, write_fixed_file
from .tools.rewrite_buffer import RewriteBuffer
from .tools.telemetry import emit_fixit_event

__all__ = [
    "BundleOutcome",
    "DiagnosticConsumer",
    "FixItRewriter",
    "LoggingConsumer",
    "RecordingConsumer",
]

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticConsumer(Protocol):
    """Downstream observer that receives every diagnostic unmodified."""

    def handle_diagnostic(self, diagnostic: Diagnostic) -> None:
        ...

    def include_in_diagnostic_counts(self) -> bool:
        ...


@dataclass(slots=True)
class RecordingConsumer:
    """Consumer that keeps every forwarded diagnostic in memory."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    counted: bool = True

    def handle_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def include_in_diagnostic_counts(self) -> bool:
        return self.counted


@dataclass(slots=True)
class LoggingConsumer:
    """Consumer that reports each forwarded diagnostic through ``logging``."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("fixit_rewriter.diagnostics"))

    def handle_diagnostic(self, diagnostic: Diagnostic) -> None:
        level = logging.ERROR if diagnostic.severity.is_error else logging.INFO
        if diagnostic.severity == Severity.WARNING:
            level = logging.WARNING
        self.logger.log(
            level,
            "%s: %s (%d fix-it hint(s))",
            diagnostic.severity.value.lower(),
            diagnostic.message or "<no message>",
            len(diagnostic.fixits),
        )

    def include_in_diagnostic_counts(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class BundleOutcome:
    """What happened to the fix-its of a single diagnostic."""

    index: int
    severity: Severity
    status: FixItStatus
    validation: HintValidation
    application: HintApplication | None = None
    counted_failure: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "severity": self.severity.value,
            "status": self.status.value,
            "validation": self.validation.to_dict(),
            "application": self.application.to_dict() if self.application else None,
            "counted_failure": self.counted_failure,
        }


class FixItRewriter:
    """Apply the fix-its attached to incoming diagnostics to one source text.

    Every diagnostic is first forwarded to the optional downstream consumer.
    Its hints are then validated as a unit and, when admitted, committed to the
    rewrite buffer. Rejected error-level bundles and bundles whose application
    fails are counted; any such failure suppresses the final write.
    """

    def __init__(
        self,
        source: str,
        *,
        input_name: str = STDOUT_MARKER,
        consumer: DiagnosticConsumer | None = None,
        marker: str = DEFAULT_OUTPUT_MARKER,
        encoding: str = "utf-8",
    ) -> None:
        self.input_name = input_name
        self.marker = marker
        self.encoding = encoding
        self._consumer = consumer
        self._buffer = RewriteBuffer(source)
        self._failures = FailureTracker()
        self._outcomes: list[BundleOutcome] = []
        self._finished = False

    @classmethod
    def from_file(
        cls,
        path: Path | str,
        *,
        consumer: DiagnosticConsumer | None = None,
        marker: str = DEFAULT_OUTPUT_MARKER,
        encoding: str = "utf-8",
    ) -> "FixItRewriter":
        """Load ``path`` verbatim (line endings untouched) into a new session."""
        source_path = Path(path)
        with source_path.open("r", encoding=encoding, newline="") as handle:
            source = handle.read()
        return cls(
            source,
            input_name=str(path),
            consumer=consumer,
            marker=marker,
            encoding=encoding,
        )

    @property
    def buffer(self) -> RewriteBuffer:
        return self._buffer

    @property
    def failures(self) -> FailureTracker:
        return self._failures

    @property
    def num_failures(self) -> int:
        return self._failures.count

    @property
    def outcomes(self) -> tuple[BundleOutcome, ...]:
        return tuple(self._outcomes)

    def include_in_diagnostic_counts(self) -> bool:
        if self._consumer is None:
            return True
        return self._consumer.include_in_diagnostic_counts()

    def handle_diagnostic(self, diagnostic: Diagnostic) -> BundleOutcome:
        """Forward ``diagnostic`` and apply its fix-its when all of them are valid."""
        if self._finished:
            raise FixItError("Fixed file already written; no further diagnostics accepted.")

        if self._consumer is not None:
            self._consumer.handle_diagnostic(diagnostic)

        index = len(self._outcomes)
        validation = validate_hints(self._buffer, diagnostic.fixits)
        if not validation.admitted:
            outcome = self._reject(index, diagnostic, validation)
        else:
            application = apply_hints(self._buffer, diagnostic.fixits)
            outcome = self._record_application(index, diagnostic, validation, application)
        self._outcomes.append(outcome)
        return outcome

    def handle_diagnostics(self, diagnostics: Iterable[Diagnostic]) -> list[BundleOutcome]:
        return [self.handle_diagnostic(diagnostic) for diagnostic in diagnostics]

    def write_fixed_file(
        self,
        output_name: str | None = None,
        *,
        stream: TextIO | None = None,
    ) -> WriteResult:
        """Write the patched text once, at the end of the session."""
        if self._finished:
            raise FixItError("Fixed file already written for this session.")
        self._finished = True
        return write_fixed_file(
            self._buffer,
            self._failures,
            self.input_name,
            output_name,
            marker=self.marker,
            encoding=self.encoding,
            stream=stream,
        )

    def _reject(self, index: int, diagnostic: Diagnostic, validation: HintValidation) -> BundleOutcome:
        counted = diagnostic.severity.is_error
        if diagnostic.has_fixits:
            LOGGER.info("Skipping fix-it for diagnostic #%d: %s", index, validation.reason)
        if counted:
            self._failures.record(validation.reason)
        emit_fixit_event(
            "bundle_rejected",
            index=index,
            severity=diagnostic.severity,
            validation=validation,
            counted=counted,
        )
        return BundleOutcome(
            index=index,
            severity=diagnostic.severity,
            status=FixItStatus.VALIDATION_REJECTED,
            validation=validation,
            counted_failure=counted,
        )

    def _record_application(
        self,
        index: int,
        diagnostic: Diagnostic,
        validation: HintValidation,
        application: HintApplication,
    ) -> BundleOutcome:
        if application.failed:
            reasons = "; ".join(reason for _, _, reason in application.failures)
            LOGGER.info("Fix-it for diagnostic #%d failed to apply: %s", index, reasons)
            self._failures.record(reasons)
            emit_fixit_event(
                "bundle_apply_failed",
                index=index,
                severity=diagnostic.severity,
                application=application,
            )
            return BundleOutcome(
                index=index,
                severity=diagnostic.severity,
                status=FixItStatus.APPLY_FAILED,
                validation=validation,
                application=application,
                counted_failure=True,
            )

        emit_fixit_event(
            "bundle_admitted",
            index=index,
            severity=diagnostic.severity,
            hints=len(application.applied),
        )
        return BundleOutcome(
            index=index,
            severity=diagnostic.severity,
            status=FixItStatus.APPLIED,
            validation=validation,
            application=application,
        )
