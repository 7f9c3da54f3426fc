"""
Correction strategy enumeration.

Rules:
- This enum defines ONLY the selectable strategies.
- No behavior, no helper methods, no side effects.
- Dispatch on strategy lives exclusively in the reducer.
"""

from __future__ import annotations

from enum import Enum


class Strategy(str, Enum):
    """
    How the controller pulls the playback clock back onto the reference clock.

    TIME_SCALE:
        Speed up or slow down the global simulation timescale until drift
        falls back under the stop threshold. Recommended.

    AUDIO_TIME_SET:
        Seek the playback device straight to the target position.
        May sound choppy.

    AUDIO_PITCH:
        Bend the playback rate until the audio catches up.
    """

    TIME_SCALE = "TIME_SCALE"
    AUDIO_TIME_SET = "AUDIO_TIME_SET"
    AUDIO_PITCH = "AUDIO_PITCH"
