"""
Skipped-tick classification.

None of these are fatal. A tick that hits one of them is a no-op and the
host simply tries again next frame.
"""

from __future__ import annotations

from enum import Enum


class SkipReason(str, Enum):
    """
    Why a tick did nothing.

    INACTIVE:
        activate() has not run yet, or deactivate() already ran.

    HOST_FROZEN:
        The host engine is scrubbing or paused globally.

    DEVICE_UNAVAILABLE:
        No playback device could be resolved.

    CLIP_UNKNOWN:
        A device exists but has no clip loaded yet (typical while loading).

    CONFIG_INCOMPLETE:
        No correction strategy is selected.
    """

    INACTIVE = "INACTIVE"
    HOST_FROZEN = "HOST_FROZEN"
    DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
    CLIP_UNKNOWN = "CLIP_UNKNOWN"
    CONFIG_INCOMPLETE = "CONFIG_INCOMPLETE"
