"""
Event definitions for the drift controller reducer.

Rules:
- Events describe facts that have occurred (or were observed this frame).
- Events carry data only (no behavior).
- All reducer decisions are based on these events.
- No clocks, no host handles, no side effects: the runtime snapshots host
  state into plain values before the reducer sees it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from controller.sync_config import SyncConfig


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """Canonical event types understood by the reducer."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    ACTIVATED = "ACTIVATED"
    STRATEGY_CHANGED = "STRATEGY_CHANGED"
    DEACTIVATED = "DEACTIVATED"
    SOURCE_CHANGED = "SOURCE_CHANGED"

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------
    TICK = "TICK"


# =============================================================================
# Host snapshots
# =============================================================================

@dataclass(frozen=True)
class DeviceSnapshot:
    """
    Plain-value reading of the playback device taken at the top of a tick.

    duration_s:
        None when no clip is loaded. Zero or negative when a clip is loaded
        but its length is not known yet.
    """

    position: float
    rate: float
    is_playing: bool
    duration_s: float | None
    loops: bool

    @property
    def has_clip(self) -> bool:
        return self.duration_s is not None


# =============================================================================
# Base Event
# =============================================================================

@dataclass(frozen=True)
class Event:
    """
    Base event type.

    All events must specify:
    - event_type: discriminant
    - ts_ms: wall-clock timestamp provided by the runtime (or fake in tests)
    """

    event_type: EventType
    ts_ms: int


# =============================================================================
# Lifecycle Events
# =============================================================================

@dataclass(frozen=True)
class Activated(Event):
    """
    The controller was attached to a session.

    original_rate is None when no device could be resolved yet; the reducer
    captures it from the first tick that sees a device. config is the
    session config in force at activation (used to apply a pinned target
    timescale straight away).
    """
    original_rate: float | None
    original_timescale: float
    config: SyncConfig | None = None


@dataclass(frozen=True)
class StrategyChanged(Event):
    """The user picked a different strategy; restore and reset."""


@dataclass(frozen=True)
class Deactivated(Event):
    """The controller is being torn down; restore and reset."""


@dataclass(frozen=True)
class SourceChanged(Event):
    """
    The collaborator pointed the controller at a different playback device.

    The old device gets its rate back; the new device's rate is captured on
    the first tick that resolves it.
    """


# =============================================================================
# Frame Events
# =============================================================================

@dataclass(frozen=True)
class Tick(Event):
    """
    One simulation frame.

    reference_time and device are None when the runtime did not read them
    (host frozen) or could not resolve them (no device).
    """
    delta_time: float
    config: SyncConfig
    timescale: float
    host_frozen: bool = False
    reference_time: float | None = None
    device: DeviceSnapshot | None = None
    debug_surface_active: bool = False
