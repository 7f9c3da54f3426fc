"""
Per-session sync configuration.

Responsibilities:
- Hold the user-chosen knobs the reducer reads every tick
- Reject values that would make the clock math meaningless

Non-responsibilities:
- No persistence (the host stores these however it likes)
- No UI
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

from controller.enums.strategy import Strategy
from controller.errors import SyncConfigError
from spec import DEFAULT_TARGET_TIMESCALE, OFFSET_MAX_S, OFFSET_MIN_S


@dataclass(frozen=True)
class SyncConfig:
    """
    Immutable session configuration.

    strategy:
        Selected correction strategy. None means "not configured" and every
        tick is skipped.

    offset_s:
        Where on the animation timeline the audio starts. For example, if the
        audio starts 1 second into the animation, set this to 1.

    target_timescale:
        Optional pinned timescale. When set it divides the reference time for
        the target position and is the baseline the TIME_SCALE strategy bends
        around. When None, 1.0 is used for the math and the timescale captured
        at activation is the baseline.

    jump_if_too_far:
        Seek straight to the target when drift exceeds the hard-jump threshold,
        whatever strategy is selected. Also makes scrubbing the timeline work.

    stop_if_animation_stopped:
        Pause the audio while the timeline is stopped and resume it afterwards.
    """

    strategy: Strategy | None = Strategy.TIME_SCALE
    offset_s: float = 0.0
    target_timescale: float | None = None
    jump_if_too_far: bool = True
    stop_if_animation_stopped: bool = True

    def __post_init__(self) -> None:
        if not math.isfinite(self.offset_s) or not (
            OFFSET_MIN_S <= self.offset_s <= OFFSET_MAX_S
        ):
            raise SyncConfigError(
                "offset_s out of range",
                {"offset_s": self.offset_s, "min": OFFSET_MIN_S, "max": OFFSET_MAX_S},
            )
        if self.target_timescale is not None and not (
            math.isfinite(self.target_timescale) and self.target_timescale > 0
        ):
            raise SyncConfigError(
                "target_timescale must be a positive finite number",
                {"target_timescale": self.target_timescale},
            )

    @property
    def effective_target_timescale(self) -> float:
        if self.target_timescale is None:
            return DEFAULT_TARGET_TIMESCALE
        return self.target_timescale

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> SyncConfig:
        """
        Load session configuration from environment variables.

        Raises:
            SyncConfigError if a value cannot be parsed or is out of range.
        """
        raw_strategy = os.environ.get("SYNC_STRATEGY", Strategy.TIME_SCALE.value)
        raw_target = os.environ.get("SYNC_TARGET_TIMESCALE", "")

        try:
            strategy = Strategy(raw_strategy.upper()) if raw_strategy else None
            offset_s = float(os.environ.get("SYNC_OFFSET_S", "0"))
            target_timescale = float(raw_target) if raw_target else None
        except ValueError as exc:
            raise SyncConfigError("invalid sync configuration", {"error": str(exc)}) from exc

        return SyncConfig(
            strategy=strategy,
            offset_s=offset_s,
            target_timescale=target_timescale,
            jump_if_too_far=os.environ.get("SYNC_JUMP_IF_TOO_FAR", "1") == "1",
            stop_if_animation_stopped=(
                os.environ.get("SYNC_STOP_IF_ANIMATION_STOPPED", "1") == "1"
            ),
        )
