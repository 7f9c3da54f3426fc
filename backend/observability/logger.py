"""
Structured event output for the drift controller.

Every controller decision, metric and tick failure ends up here as a
single compact JSON line on stdout. Frames keep running even when an
event cannot be encoded.
"""

from __future__ import annotations

import json
import math
import sys
from typing import Any, Callable, Mapping

_SEPARATORS = (",", ":")


def _write_stdout(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


# Tests replace this to capture lines
_print: Callable[[str], None] = _write_stdout


def _finite(value: Any) -> Any:
    # Drift math can produce inf/nan; strict JSON has no spelling for them
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    if isinstance(value, Mapping):
        return {k: _finite(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite(v) for v in value]
    return value


def _encode(event: Mapping[str, Any]) -> str:
    try:
        return json.dumps(_finite(event), ensure_ascii=False, separators=_SEPARATORS,
                          allow_nan=False)
    except (TypeError, ValueError) as exc:
        return json.dumps(
            {
                "ts_ms": event.get("ts_ms"),
                "event_type": "LOGGER_SERIALIZATION_ERROR",
                "error": str(exc),
                "original_event_repr": repr(event),
            },
            ensure_ascii=False,
            separators=_SEPARATORS,
        )


def log_event(event: Mapping[str, Any]) -> None:
    """
    Emit one event as a JSON line.

    Non-finite floats are written as strings. An event that still cannot
    be encoded is replaced by a LOGGER_SERIALIZATION_ERROR record carrying
    its repr, so callers never see an exception from here.
    """
    _print(_encode(event))
