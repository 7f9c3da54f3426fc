"""
Host capability contracts.

The controller never reaches a host global. Everything it reads or writes
goes through one of these narrow Protocols, injected at construction.

This module contains:
- Narrow Protocols (capabilities, not implementations)
- Zero controller logic
- Zero state mutation
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class ReferenceClockProtocol(Protocol):
    def current_time(self) -> float:
        """
        Animation timeline position in seconds.

        Returns the exact same value on consecutive frames while the
        timeline is stopped.
        """


@runtime_checkable
class PlaybackDeviceProtocol(Protocol):
    """
    Controllable playback clock.

    position and rate are read/write. Writing position seeks.
    duration_s is None while no clip is loaded.
    """

    position: float
    rate: float

    @property
    def is_playing(self) -> bool: ...

    @property
    def duration_s(self) -> float | None: ...

    @property
    def loops(self) -> bool: ...

    def pause(self) -> None: ...
    def resume(self) -> None: ...


@runtime_checkable
class TimescaleControlProtocol(Protocol):
    """Single scalar knob scaling the whole simulation."""

    def get_scale(self) -> float: ...
    def set_scale(self, value: float) -> None: ...


@runtime_checkable
class HostProtocol(Protocol):
    def is_frozen(self) -> bool:
        """True while the host is scrubbing or paused at the engine level."""


# Resolves which physical device to use. Returning None means "not yet".
DeviceResolver = Callable[[], "PlaybackDeviceProtocol | None"]

# Receives the rendered telemetry text for the debug surface.
TelemetrySink = Callable[[str], None]
