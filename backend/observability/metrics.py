"""
Metric helpers on top of the JSONL logger.

Responsibilities:
- Emit point metrics (one metric = one log event, never aggregated)
- Measure block durations with monotonic time

Design notes:
- Durations use monotonic time (immune to wall-clock changes)
- Event timestamps (ts_ms) use wall-clock time for log correlation
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from observability.logger import log_event


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def record_metric(
    name: str,
    value: float,
    *,
    tags: tuple[tuple[str, str], ...] | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a single METRIC event."""
    log_event({
        "ts_ms": _now_ms(),
        "event_type": "METRIC",
        "metric": name,
        "value": value,
        "tags": dict(tags or ()),
        "details": details or {},
    })


@contextmanager
def timed(name: str, *, details: dict[str, Any] | None = None) -> Iterator[None]:
    """
    Measure the enclosed block and emit a METRIC_TIMER event.

    Guarantees:
    - The metric is emitted exactly once, even if the block raises
    - Exceptions inside the block are not suppressed

    Usage:
        with timed("simulation_run", details={"frames": 600}):
            run()
    """
    start_ns = time.monotonic_ns()
    try:
        yield
    finally:
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "METRIC_TIMER",
            "metric": name,
            "value_ms": (time.monotonic_ns() - start_ns) / 1_000_000,
            "details": details or {},
        })
