"""
SPEC-AS-CONSTANTS
-----------------
Single source of truth for all tunable behavior of the drift controller.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Hysteresis thresholds (seconds of drift)
# =============================================================================

# Correction begins at or above this magnitude
DRIFT_CORRECT_THRESHOLD_S: Final[float] = 0.05

# An in-flight correction is released at or below this magnitude
DRIFT_STOP_THRESHOLD_S: Final[float] = 0.01

# Above this magnitude a forced seek overrides the selected strategy
HARD_JUMP_THRESHOLD_S: Final[float] = 1.0

# AUDIO_TIME_SET seeks once |drift| reaches this fraction of the correct threshold
TIME_SET_DEAD_ZONE_FACTOR: Final[float] = 0.5

# =============================================================================
# Correction step
# =============================================================================

# Base increment per second of elapsed tick time
ADJUSTMENT_STEP: Final[float] = 0.05

# Positive drift means audio is ahead: slow the audio down
PITCH_STEP_DIRECTION: Final[int] = -1
PITCH_STEP_MULTIPLIER: Final[float] = 1.0

# The global scale also advances the reference clock, so it needs a larger pull
TIMESCALE_STEP_DIRECTION: Final[int] = 1
TIMESCALE_STEP_MULTIPLIER: Final[float] = 10.0

# =============================================================================
# Telemetry
# =============================================================================

# <= 4 Hz refresh of the debug text
TELEMETRY_PUBLISH_INTERVAL_S: Final[float] = 0.25

# =============================================================================
# Session configuration bounds / defaults
# =============================================================================

OFFSET_MIN_S: Final[float] = -60.0
OFFSET_MAX_S: Final[float] = 60.0

DEFAULT_TARGET_TIMESCALE: Final[float] = 1.0

# =============================================================================
# Sentinels
# =============================================================================

# No reference clock reading can equal this, so the first tick never looks "stopped"
REFERENCE_TIME_NEVER_SEEN: Final[float] = -1.0
