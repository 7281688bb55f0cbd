"""Session-wide accounting of fix-it bundles that could not be honoured."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

__all__ = ["FAILURE_ADVISORY", "FailureTracker"]

LOGGER = logging.getLogger(__name__)

FAILURE_ADVISORY = "error without fix-it advice detected; fix-it will produce no output"


@dataclass(slots=True)
class FailureTracker:
    """Monotonic failure counter that gates writing the fixed file."""

    _count: int = field(default=0, init=False)
    _advised: bool = field(default=False, init=False)

    @property
    def count(self) -> int:
        return self._count

    @property
    def advised(self) -> bool:
        return self._advised

    @property
    def clean(self) -> bool:
        return self._count == 0

    def record(self, reason: str = "") -> bool:
        """Count one failure; return True when this was the first one."""
        self._count += 1
        if reason:
            LOGGER.debug("Fix-it failure #%d: %s", self._count, reason)
        if self._advised:
            return False
        self._advised = True
        LOGGER.warning(FAILURE_ADVISORY)
        return True
