"""
Authoritative drift controller state container.

Rules:
- This dataclass is a pure data model.
- It contains ALL state the reducer may ever need between ticks.
- Replaced wholesale by the runtime; never mutated in place.
"""
from __future__ import annotations

from dataclasses import dataclass

from controller.enums.phase import CorrectionPhase
from controller.enums.skip_reason import SkipReason
from spec import REFERENCE_TIME_NEVER_SEEN


@dataclass(frozen=True)
class ControllerState:
    """Immutable snapshot of all controller-owned state."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    active: bool = False

    # Captured at activation, restored on strategy change / deactivation.
    # original_rate stays None until a device has been seen.
    original_rate: float | None = None
    original_timescale: float = 1.0

    # ------------------------------------------------------------------
    # Hysteresis
    # ------------------------------------------------------------------

    # Signed distance the active correction has pushed rate/timescale away
    # from its baseline. 0.0 means no correction in flight.
    current_adjustment: float = 0.0

    previous_drift: float = 0.0
    previous_reference_time: float = REFERENCE_TIME_NEVER_SEEN

    # ------------------------------------------------------------------
    # Telemetry throttle
    # ------------------------------------------------------------------
    debug_accumulator: float = 0.0

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    last_skip_reason: SkipReason | None = None

    @property
    def phase(self) -> CorrectionPhase:
        if self.current_adjustment != 0:
            return CorrectionPhase.CORRECTING
        return CorrectionPhase.IDLE
