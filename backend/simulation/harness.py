"""
Closed-loop simulation of a host driving the drift controller.

Each frame:
1. The reference clock advances by frame_dt * global timescale
2. The playback device advances by frame_dt * rate * (1 + skew),
   unless it is inside a stall window
3. The controller ticks
4. The resulting drift is recorded

Deterministic: no wall clock, no randomness.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from adapters.memory import InMemoryPlaybackDevice, InMemoryTimescale, ManualReferenceClock
from config import AppConfig
from controller.drift import compute_drift, target_playback_time
from controller.runtime import DriftController
from controller.sync_config import SyncConfig
from observability.metrics import timed


@dataclass(frozen=True)
class SimulationResult:
    """Per-frame traces plus the device/knob state at the end of the run."""

    drift: np.ndarray
    timescale: np.ndarray
    rate: np.ndarray
    seeks: int
    final_adjustment: float

    def summary(self) -> dict[str, Any]:
        abs_drift = np.abs(self.drift)
        return {
            "frames": int(self.drift.size),
            "mean_abs_drift_s": float(abs_drift.mean()) if abs_drift.size else 0.0,
            "p95_abs_drift_s": float(np.percentile(abs_drift, 95)) if abs_drift.size else 0.0,
            "max_abs_drift_s": float(abs_drift.max()) if abs_drift.size else 0.0,
            "seeks": self.seeks,
            "final_timescale": float(self.timescale[-1]) if self.timescale.size else None,
            "final_rate": float(self.rate[-1]) if self.rate.size else None,
            "final_adjustment": self.final_adjustment,
        }


def simulate(
    config: SyncConfig,
    *,
    frames: int = 600,
    frame_dt: float = 1.0 / 60.0,
    skew: float = 0.0,
    stall_at: int | None = None,
    stall_frames: int = 0,
    duration_s: float = 120.0,
    loops: bool = False,
    app_config: AppConfig | None = None,
) -> SimulationResult:
    """
    Run the controller against in-memory adapters for `frames` frames.

    skew:
        Fractional speed error of the playback device (0.02 = 2% fast).

    stall_at / stall_frames:
        Freeze the device (audio hiccup) for stall_frames frames starting
        at frame stall_at.
    """
    if app_config is None:
        app_config = AppConfig(enable_json_logs=False, enable_metrics=False)

    clock = ManualReferenceClock()
    timescale = InMemoryTimescale()
    device = InMemoryPlaybackDevice(duration_s=duration_s, loops=loops)
    controller = DriftController(
        reference_clock=clock,
        timescale=timescale,
        device=device,
        config=config,
        app_config=app_config,
    )

    drift = np.zeros(frames)
    scales = np.zeros(frames)
    rates = np.zeros(frames)

    def run() -> None:
        controller.activate()
        for frame in range(frames):
            clock.advance(frame_dt * timescale.get_scale())
            stalled = stall_at is not None and stall_at <= frame < stall_at + stall_frames
            if not stalled:
                device.advance(frame_dt * (1.0 + skew))

            controller.tick(frame_dt)

            target = target_playback_time(
                clock.current_time(),
                offset_s=config.offset_s,
                target_timescale=config.effective_target_timescale,
                duration_s=duration_s,
                loops=loops,
            )
            drift[frame] = compute_drift(device.position, target)
            scales[frame] = timescale.get_scale()
            rates[frame] = device.rate

    if app_config.enable_metrics:
        strategy = config.strategy.value if config.strategy is not None else None
        with timed("simulation_run", details={"frames": frames, "strategy": strategy}):
            run()
    else:
        run()

    return SimulationResult(
        drift=drift,
        timescale=scales,
        rate=rates,
        seeks=len(device.seeks),
        final_adjustment=controller.state.current_adjustment,
    )
