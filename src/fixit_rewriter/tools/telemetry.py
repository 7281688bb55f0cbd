"""Structured telemetry events emitted while rewriting fix-its."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

__all__ = ["TELEMETRY_LOGGER", "emit_fixit_event"]

TELEMETRY_LOGGER = logging.getLogger("fixit_rewriter.telemetry")


def _event_value(value: Any) -> Any:
    """Flatten outcome records, statuses and severities for a JSON payload."""
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (str, int, float)):
        return value
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return _event_value(to_dict())
    describe = getattr(value, "describe", None)
    if callable(describe):
        return describe()
    if isinstance(value, Mapping):
        return {str(key): _event_value(child) for key, child in value.items()}
    if isinstance(value, (list, tuple)):
        return [_event_value(item) for item in value]
    return str(value)


def emit_fixit_event(event: str, **fields: Any) -> None:
    """Log one compact JSON line for ``event`` when telemetry is enabled."""
    if not TELEMETRY_LOGGER.isEnabledFor(logging.INFO):
        return
    payload = {"event": event, "timestamp": datetime.now(timezone.utc).isoformat()}
    payload.update((key, _event_value(value)) for key, value in fields.items())
    TELEMETRY_LOGGER.info(json.dumps(payload, separators=(",", ":"), ensure_ascii=True))
