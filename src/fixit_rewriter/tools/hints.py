"""Validation and application of the fix-it hints attached to one diagnostic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from ..errors import FixItError, FixItStatus
from ..structured import FixItHint
from .rewrite_buffer import UNADDRESSABLE, RewriteBuffer

__all__ = ["HintApplication", "HintValidation", "apply_hints", "validate_hints"]


@dataclass(frozen=True, slots=True)
class HintValidation:
    """All-or-nothing verdict for a bundle of hints."""

    status: FixItStatus
    hint_index: int | None = None
    reason: str = ""

    @property
    def admitted(self) -> bool:
        return self.status == FixItStatus.ADMITTED

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "hint_index": self.hint_index, "reason": self.reason}


@dataclass(frozen=True, slots=True)
class HintApplication:
    """Result of pushing an admitted bundle into the rewrite buffer."""

    applied: tuple[int, ...] = ()
    failures: tuple[tuple[int, FixItStatus, str], ...] = ()

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> dict[str, Any]:
        return {
            "applied": list(self.applied),
            "failures": [
                {"hint_index": index, "status": status.value, "reason": reason}
                for index, status, reason in self.failures
            ],
        }


def validate_hints(buffer: RewriteBuffer, hints: Sequence[FixItHint]) -> HintValidation:
    """Decide whether every hint in ``hints`` can be applied to ``buffer``.

    A bundle without hints is rejected since there is nothing to apply. Each
    hint is checked against the buffer and against the hints before it in the
    bundle, since overlapping edits have no defined order. The first hint that
    fails rejects the whole bundle. The buffer is not touched.
    """
    if not hints:
        return HintValidation(status=FixItStatus.NO_HINTS, reason="Diagnostic carries no fix-it hints.")

    claimed: list[tuple[int, int]] = []
    for index, hint in enumerate(hints):
        source_range = hint.remove_range
        if source_range is not None:
            if not source_range.is_well_formed:
                return HintValidation(
                    status=FixItStatus.INVALID_RANGE,
                    hint_index=index,
                    reason=f"Range [{source_range.begin}, {source_range.end}) ends before it begins.",
                )
            if buffer.range_size(source_range) == UNADDRESSABLE:
                return HintValidation(
                    status=FixItStatus.UNADDRESSABLE,
                    hint_index=index,
                    reason=f"Range [{source_range.begin}, {source_range.end}) is not rewritable.",
                )
            begin, end = source_range.begin, source_range.end
            if _overlaps_claimed(claimed, begin, end):
                return HintValidation(
                    status=FixItStatus.UNADDRESSABLE,
                    hint_index=index,
                    reason=f"Range [{begin}, {end}) overlaps another fix-it in the same diagnostic.",
                )
            claimed.append((begin, end))
            continue

        location = hint.insertion_location
        if location is None or not buffer.is_rewritable(location):
            return HintValidation(
                status=FixItStatus.UNADDRESSABLE,
                hint_index=index,
                reason=f"Insertion location {location} is not rewritable.",
            )
        if _overlaps_claimed(claimed, location, location):
            return HintValidation(
                status=FixItStatus.UNADDRESSABLE,
                hint_index=index,
                reason=f"Insertion location {location} falls inside another fix-it in the same diagnostic.",
            )
        claimed.append((location, location))

    return HintValidation(status=FixItStatus.ADMITTED)


def _overlaps_claimed(claimed: Sequence[tuple[int, int]], begin: int, end: int) -> bool:
    # Same rule as the buffer applies to committed fragments.
    return any(begin < other_end and other_begin < end for other_begin, other_end in claimed)


def apply_hints(buffer: RewriteBuffer, hints: Sequence[FixItHint]) -> HintApplication:
    """Apply admitted ``hints`` in order, collecting every mutation failure."""
    applied: list[int] = []
    failures: list[tuple[int, FixItStatus, str]] = []

    for index, hint in enumerate(hints):
        source_range = hint.remove_range
        try:
            if source_range is None:
                # We're adding code.
                buffer.insert_before(hint.insertion_location, hint.code_to_insert)
            elif hint.kind == "remove":
                buffer.remove(source_range)
            else:
                buffer.replace(source_range, hint.code_to_insert)
        except FixItError as error:
            failures.append((index, error.status, str(error)))
            continue
        applied.append(index)

    return HintApplication(applied=tuple(applied), failures=tuple(failures))
