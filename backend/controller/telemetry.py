"""
Debug telemetry snapshot and rendering.

Purely informational: nothing here feeds back into control decisions.
"""

from __future__ import annotations

from dataclasses import dataclass

from spec import DRIFT_CORRECT_THRESHOLD_S


@dataclass(frozen=True)
class TelemetrySnapshot:
    """Values shown on the host's debug surface."""
    reference_time: float
    drift: float
    current_adjustment: float
    timescale: float
    rate: float


def render_telemetry(snapshot: TelemetrySnapshot) -> str:
    """Render a snapshot as the multi-line text the debug surface displays."""
    # Only audio running ahead is flagged
    over_limit = " (over limit)" if snapshot.drift > DRIFT_CORRECT_THRESHOLD_S else ""
    return (
        f"reference time: {snapshot.reference_time:.3f}\n"
        f"drift: {snapshot.drift:.3f}{over_limit}\n"
        f"adjustment: {snapshot.current_adjustment:.4f}\n"
        f"time scale: {snapshot.timescale:.4f}\n"
        f"rate: {snapshot.rate:.4f}"
    )
