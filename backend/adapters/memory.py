"""
In-memory host adapters.

Reference implementations of every capability the drift controller needs.
They behave like a tiny engine: the caller advances them frame by frame.
Used by the simulation harness and the test suite.
"""

from __future__ import annotations

import math


class ManualReferenceClock:
    """Animation timeline that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.time = start

    def current_time(self) -> float:
        return self.time

    def advance(self, seconds: float) -> None:
        self.time += seconds


class InMemoryTimescale:
    """Global timescale knob; keeps every value it was set to."""

    def __init__(self, scale: float = 1.0) -> None:
        self.scale = scale
        self.history: list[float] = []

    def get_scale(self) -> float:
        return self.scale

    def set_scale(self, value: float) -> None:
        self.scale = value
        self.history.append(value)


class StaticHost:
    """Host whose frozen flag is flipped by hand."""

    def __init__(self, frozen: bool = False) -> None:
        self.frozen = frozen

    def is_frozen(self) -> bool:
        return self.frozen


class InMemoryPlaybackDevice:
    """
    Playback clock with a clip of duration_s seconds.

    - advance(dt) moves the head by rate * dt while playing
    - looping clips wrap; non-looping clips stop at the end
    - every seek is recorded in `seeks`
    """

    def __init__(
        self,
        *,
        position: float = 0.0,
        rate: float = 1.0,
        duration_s: float | None = 10.0,
        loops: bool = False,
        playing: bool = True,
    ) -> None:
        self._position = position
        self.rate = rate
        self._duration_s = duration_s
        self._loops = loops
        self._playing = playing
        self.seeks: list[float] = []
        self.pause_calls = 0
        self.resume_calls = 0

    # ------------------------------------------------------------------
    # PlaybackDeviceProtocol
    # ------------------------------------------------------------------

    @property
    def position(self) -> float:
        return self._position

    @position.setter
    def position(self, value: float) -> None:
        self._position = value
        self.seeks.append(value)

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def duration_s(self) -> float | None:
        return self._duration_s

    @property
    def loops(self) -> bool:
        return self._loops

    def pause(self) -> None:
        self.pause_calls += 1
        self._playing = False

    def resume(self) -> None:
        self.resume_calls += 1
        self._playing = True

    # ------------------------------------------------------------------
    # Engine side
    # ------------------------------------------------------------------

    def play(self) -> None:
        self._playing = True

    def load_clip(self, duration_s: float | None, *, loops: bool = False) -> None:
        self._duration_s = duration_s
        self._loops = loops

    def advance(self, seconds: float) -> None:
        if not self._playing:
            return
        position = self._position + self.rate * seconds
        duration = self._duration_s
        if duration is not None and duration > 0:
            if self._loops:
                position = math.fmod(position, duration)
            elif position >= duration:
                position = duration
                self._playing = False
        self._position = position
