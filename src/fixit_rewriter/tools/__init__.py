"""Building blocks of the fix-it rewriting engine."""

from .failures import FAILURE_ADVISORY, FailureTracker
from .hints import HintApplication, HintValidation, apply_hints, validate_hints
from .output import (
    DEFAULT_OUTPUT_MARKER,
    STDOUT_MARKER,
    OutputDestination,
    WriteResult,
    resolve_output_destination,
    write_fixed_file,
)
from .rewrite_buffer import UNADDRESSABLE, RewriteBuffer

__all__ = [
    "DEFAULT_OUTPUT_MARKER",
    "FAILURE_ADVISORY",
    "FailureTracker",
    "HintApplication",
    "HintValidation",
    "OutputDestination",
    "RewriteBuffer",
    "STDOUT_MARKER",
    "UNADDRESSABLE",
    "WriteResult",
    "apply_hints",
    "resolve_output_destination",
    "validate_hints",
    "write_fixed_file",
]
