"""
Correction phase enumeration.

The phase is derived, never stored: a non-zero adjustment accumulator
means a correction is in flight.
"""

from __future__ import annotations

from enum import Enum


class CorrectionPhase(str, Enum):
    """Hysteresis phase shared by the gradual strategies."""

    IDLE = "IDLE"
    CORRECTING = "CORRECTING"
