"""
Clock math for the drift controller.

Pure functions only: no state, no host access.
"""

from __future__ import annotations

import math


def sign(value: float) -> int:
    """Return -1, 0 or 1. sign(0) is 0."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def target_playback_time(
    reference_time: float,
    *,
    offset_s: float,
    target_timescale: float,
    duration_s: float,
    loops: bool,
) -> float:
    """
    Playback position that corresponds to reference_time.

    - Before the offset the audio has not started yet: 0.
    - Looping clips wrap into [0, duration_s).
    - Non-looping clips saturate at duration_s.
    - duration_s <= 0 means the length is unknown: no wrap, no clamp.
    """
    raw = (reference_time - offset_s) / target_timescale
    if raw < 0:
        return 0.0
    if duration_s <= 0:
        return raw
    if loops:
        return math.fmod(raw, duration_s)
    return min(raw, duration_s)


def compute_drift(position: float, target: float) -> float:
    """Positive drift means the audio is ahead of where it should be."""
    return position - target
