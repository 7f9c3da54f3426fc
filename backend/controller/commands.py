"""
Side-effect command definitions for the drift controller.

Rules:
- Commands are declarative requests for side effects.
- Commands are emitted by the reducer and executed by the runtime.
- No behavior, no I/O, no clocks.
Invariant:
    - All concrete Command subclasses MUST be frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# =============================================================================
# Command Type Enumeration
# =============================================================================

class CommandType(str, Enum):
    """
    Canonical command types emitted by the reducer.

    These are stable discriminants used for logging and runtime dispatch.
    """

    # Playback device
    SEEK_PLAYBACK = "SEEK_PLAYBACK"
    PAUSE_PLAYBACK = "PAUSE_PLAYBACK"
    RESUME_PLAYBACK = "RESUME_PLAYBACK"
    SET_PLAYBACK_RATE = "SET_PLAYBACK_RATE"

    # Global
    SET_TIMESCALE = "SET_TIMESCALE"

    # Debug surface
    PUBLISH_TELEMETRY = "PUBLISH_TELEMETRY"

    # Observability
    LOG_EVENT = "LOG_EVENT"
    RECORD_METRIC = "RECORD_METRIC"


# =============================================================================
# Base Command
# =============================================================================

class Command:
    """
    Base command type.

    command_type is an explicit discriminant and must never be inferred
    from Python type identity.
    """

    command_type: CommandType


# =============================================================================
# Playback Device Commands
# =============================================================================

@dataclass(frozen=True)
class SeekPlayback(Command):
    """Move the playback head to position (seconds)."""
    position: float
    command_type: CommandType = CommandType.SEEK_PLAYBACK


@dataclass(frozen=True)
class PausePlayback(Command):
    """Pause the playback device, keeping its position."""
    command_type: CommandType = CommandType.PAUSE_PLAYBACK


@dataclass(frozen=True)
class ResumePlayback(Command):
    """Resume a paused playback device."""
    command_type: CommandType = CommandType.RESUME_PLAYBACK


@dataclass(frozen=True)
class SetPlaybackRate(Command):
    """Set the playback rate (pitch multiplier)."""
    rate: float
    command_type: CommandType = CommandType.SET_PLAYBACK_RATE


# =============================================================================
# Global Commands
# =============================================================================

@dataclass(frozen=True)
class SetTimescale(Command):
    """Set the global simulation timescale."""
    scale: float
    command_type: CommandType = CommandType.SET_TIMESCALE


# =============================================================================
# Debug Surface Commands
# =============================================================================

@dataclass(frozen=True)
class PublishTelemetry(Command):
    """Replace the debug text shown by the host's debug surface."""
    text: str
    command_type: CommandType = CommandType.PUBLISH_TELEMETRY


# =============================================================================
# Observability Commands
# =============================================================================

@dataclass(frozen=True)
class LogEvent(Command):
    """Request to emit a structured observability event."""
    event: dict[str, Any]
    command_type: CommandType = CommandType.LOG_EVENT


@dataclass(frozen=True)
class RecordMetric(Command):
    """Request to record a metric value."""
    name: str
    value: float
    tags: tuple[tuple[str, str], ...] | None = None
    command_type: CommandType = CommandType.RECORD_METRIC
