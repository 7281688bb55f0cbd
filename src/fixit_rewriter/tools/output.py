"""Destination resolution and writing of the fixed source file."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, TextIO

from ..errors import FixItStatus, OutputError
from .failures import FailureTracker
from .rewrite_buffer import RewriteBuffer
from .telemetry import emit_fixit_event

__all__ = [
    "DEFAULT_OUTPUT_MARKER",
    "STDOUT_MARKER",
    "OutputDestination",
    "WriteResult",
    "resolve_output_destination",
    "write_fixed_file",
]

LOGGER = logging.getLogger(__name__)

STDOUT_MARKER = "-"
DEFAULT_OUTPUT_MARKER = "fixit"


@dataclass(frozen=True, slots=True)
class OutputDestination:
    """Where the fixed file goes; ``path`` is None for standard output."""

    path: Path | None = None

    @property
    def is_stdout(self) -> bool:
        return self.path is None

    def describe(self) -> str:
        return "<stdout>" if self.path is None else self.path.as_posix()


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome of the end-of-session write."""

    status: FixItStatus
    destination: OutputDestination | None = None
    failures: int = 0
    characters_written: int = 0
    message: str = ""

    @property
    def written(self) -> bool:
        return self.status == FixItStatus.WRITTEN

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "destination": self.destination.describe() if self.destination else None,
            "failures": self.failures,
            "characters_written": self.characters_written,
            "message": self.message,
        }


def resolve_output_destination(
    input_name: str,
    output_name: str | None = None,
    *,
    marker: str = DEFAULT_OUTPUT_MARKER,
) -> OutputDestination:
    """Pick the destination for the fixed file.

    An explicit ``output_name`` always wins, with ``-`` meaning standard
    output. Otherwise an input of ``-`` also means standard output, and any
    other input gets ``marker`` spliced in before its suffix, so ``foo.c``
    becomes ``foo.fixit.c``.
    """
    if output_name:
        if output_name == STDOUT_MARKER:
            return OutputDestination()
        return OutputDestination(path=Path(output_name))
    if input_name == STDOUT_MARKER:
        return OutputDestination()
    source = Path(input_name)
    suffix = source.suffix
    stem = source.name[: -len(suffix)] if suffix else source.name
    return OutputDestination(path=source.with_name(f"{stem}.{marker}{suffix}"))


def _encode_for(destination: OutputDestination, text: str, encoding: str) -> bytes:
    try:
        return text.encode(encoding)
    except (UnicodeError, LookupError) as error:
        raise OutputError(
            f"Unable to encode fixed file for {destination.describe()} as {encoding}: {error}",
            details={"destination": destination.describe(), "encoding": encoding},
        ) from error


@contextmanager
def _flushing(stream: TextIO) -> Iterator[TextIO]:
    try:
        yield stream
    finally:
        stream.flush()


def _write_payload(path: Path, payload: bytes) -> None:
    # Opening truncates, so only already-encoded bytes reach this point.
    try:
        with path.open("wb") as handle:
            handle.write(payload)
            handle.flush()
    except OSError as error:
        raise OutputError(
            f"Unable to write {path.as_posix()}: {error}",
            details={"destination": path.as_posix()},
        ) from error


def write_fixed_file(
    buffer: RewriteBuffer,
    tracker: FailureTracker,
    input_name: str,
    output_name: str | None = None,
    *,
    marker: str = DEFAULT_OUTPUT_MARKER,
    encoding: str = "utf-8",
    stream: TextIO | None = None,
) -> WriteResult:
    """Write the patched text unless any fix-it failed during the session.

    File destinations receive the text encoded with ``encoding`` and line
    terminators untouched. The text is encoded before the file is opened, so
    an encoding failure raises ``OutputError`` without truncating an existing
    file. Standard output (or ``stream``) receives the text as is.
    """
    if tracker.count > 0:
        message = f"{tracker.count} fix-it failures detected; code will not be modified"
        LOGGER.error(message)
        emit_fixit_event("output_suppressed", failures=tracker.count)
        return WriteResult(status=FixItStatus.OUTPUT_SUPPRESSED, failures=tracker.count, message=message)

    destination = resolve_output_destination(input_name, output_name, marker=marker)

    if not buffer.has_changes:
        message = "Main file is unchanged"
        LOGGER.info(message)
        emit_fixit_event("output_unchanged", destination=destination)
        return WriteResult(status=FixItStatus.NO_CHANGES, destination=destination, message=message)

    text = buffer.snapshot()
    if destination.is_stdout:
        with _flushing(stream if stream is not None else sys.stdout) as handle:
            handle.write(text)
    else:
        _write_payload(destination.path, _encode_for(destination, text, encoding))

    emit_fixit_event(
        "output_written",
        destination=destination,
        characters=len(text),
        edits=buffer.edit_count,
    )
    return WriteResult(
        status=FixItStatus.WRITTEN,
        destination=destination,
        characters_written=len(text),
        message=f"Wrote fixed file to {destination.describe()}",
    )
