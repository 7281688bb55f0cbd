"""Offset-mapping text buffer that accumulates committed fix-it edits."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from ..errors import FixItError, InvalidRangeError, UnaddressableError
from ..structured import SourceRange

__all__ = ["UNADDRESSABLE", "RewriteBuffer"]

LOGGER = logging.getLogger(__name__)

# Returned by ``RewriteBuffer.range_size`` when a range cannot be mapped.
UNADDRESSABLE = -1


@dataclass(frozen=True, slots=True)
class _Fragment:
    """Committed edit expressed against original offsets."""

    begin: int
    end: int
    text: str
    kind: Literal["insert", "replace"]
    sequence: int

    @property
    def width(self) -> int:
        return self.end - self.begin

    def merge_key(self) -> tuple[int, int, int, int]:
        # Zero-width fragments at an offset precede the span starting there.
        # Insertions made with ``insert_before`` land ahead of earlier ones.
        if self.width:
            return (self.begin, 1, 0, self.sequence)
        if self.kind == "insert":
            return (self.begin, 0, 0, -self.sequence)
        return (self.begin, 0, 1, self.sequence)


@dataclass(slots=True)
class RewriteBuffer:
    """Patched view over ``original`` addressed exclusively by original offsets.

    Every committed edit is kept as an append-only fragment. The current text is
    produced by merging those fragments, ordered by original offset, with the
    untouched spans of the original. A span consumed by a removal or replacement
    is no longer addressable: later edits that reach into it are refused.
    """

    original: str
    _fragments: list[_Fragment] = field(default_factory=list, init=False, repr=False)
    _sequence: int = field(default=0, init=False, repr=False)

    @property
    def has_changes(self) -> bool:
        return bool(self._fragments)

    @property
    def edit_count(self) -> int:
        return len(self._fragments)

    def is_rewritable(self, location: int | None) -> bool:
        """Return True when ``location`` still maps to a buffer position."""
        if not self._in_bounds(location):
            return False
        return not self._conflicts(location, location)

    def range_size(self, source_range: SourceRange) -> int:
        """Return the current length of ``source_range`` or ``UNADDRESSABLE``."""
        if not self._is_addressable(source_range):
            return UNADDRESSABLE
        if source_range.begin == source_range.end:
            return 0
        start = self.mapped_offset(source_range.begin, after_inserts=True)
        end = self.mapped_offset(source_range.end)
        return end - start

    def mapped_offset(self, offset: int, *, after_inserts: bool = False) -> int:
        """Translate an original ``offset`` into current buffer coordinates."""
        if not self.is_rewritable(offset):
            raise UnaddressableError(
                f"Offset {offset} is not rewritable.",
                details={"offset": offset},
            )
        delta = 0
        for fragment in self._fragments:
            if fragment.begin < offset and fragment.end <= offset:
                delta += len(fragment.text) - fragment.width
            elif after_inserts and fragment.width == 0 and fragment.begin == offset:
                delta += len(fragment.text)
        return offset + delta

    def insert_before(self, location: int | None, text: str) -> None:
        """Insert ``text`` ahead of everything currently mapped at ``location``."""
        if not self.is_rewritable(location):
            raise UnaddressableError(
                f"Insertion location {location} is not rewritable.",
                details={"location": location},
            )
        if not text:
            return
        self._commit(location, location, text, "insert")

    def remove(self, source_range: SourceRange) -> None:
        """Delete the text currently mapped for ``source_range``."""
        self._require_addressable(source_range)
        if source_range.begin == source_range.end:
            return
        self._commit(source_range.begin, source_range.end, "", "replace")

    def replace(self, source_range: SourceRange, text: str) -> None:
        """Remove ``source_range`` and put ``text`` at the start of the removed span."""
        self._require_addressable(source_range)
        if source_range.begin == source_range.end and not text:
            return
        self._commit(source_range.begin, source_range.end, text, "replace")

    def snapshot(self) -> str:
        """Return the current patched text."""
        if not self._fragments:
            return self.original
        pieces: list[str] = []
        cursor = 0
        for fragment in sorted(self._fragments, key=_Fragment.merge_key):
            if fragment.begin < cursor:
                raise FixItError(
                    "Committed edits overlap.",
                    details={"begin": fragment.begin, "end": fragment.end, "cursor": cursor},
                )
            pieces.append(self.original[cursor : fragment.begin])
            pieces.append(fragment.text)
            cursor = fragment.end
        pieces.append(self.original[cursor:])
        return "".join(pieces)

    def _commit(self, begin: int, end: int, text: str, kind: Literal["insert", "replace"]) -> None:
        self._sequence += 1
        self._fragments.append(_Fragment(begin=begin, end=end, text=text, kind=kind, sequence=self._sequence))
        LOGGER.debug("Committed %s [%d, %d) with %d character(s)", kind, begin, end, len(text))

    def _require_addressable(self, source_range: SourceRange) -> None:
        if not source_range.is_well_formed:
            raise InvalidRangeError(
                f"Range [{source_range.begin}, {source_range.end}) ends before it begins.",
                details={"begin": source_range.begin, "end": source_range.end},
            )
        if not self._is_addressable(source_range):
            raise UnaddressableError(
                f"Range [{source_range.begin}, {source_range.end}) is not rewritable.",
                details={"begin": source_range.begin, "end": source_range.end},
            )

    def _is_addressable(self, source_range: SourceRange) -> bool:
        if not source_range.is_well_formed:
            return False
        if not (self._in_bounds(source_range.begin) and self._in_bounds(source_range.end)):
            return False
        return not self._conflicts(source_range.begin, source_range.end)

    def _in_bounds(self, offset: int | None) -> bool:
        return offset is not None and 0 <= offset <= len(self.original)

    def _conflicts(self, begin: int, end: int) -> bool:
        # Covers consumed spans reaching into [begin, end) as well as zero-width
        # fragments strictly inside it.
        return any(begin < fragment.end and fragment.begin < end for fragment in self._fragments)
