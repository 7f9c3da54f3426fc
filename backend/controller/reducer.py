"""
Pure drift controller reducer.

(state, event) -> (new_state, commands)

Rules:
- Pure: no side effects, no IO, no clocks, no host handles.
- Deterministic: output depends only on inputs.
- Total: every event is handled or explicitly ignored (logged).
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any

from controller.commands import (
    Command,
    LogEvent,
    PausePlayback,
    PublishTelemetry,
    RecordMetric,
    ResumePlayback,
    SeekPlayback,
    SetPlaybackRate,
    SetTimescale,
)
from controller.drift import compute_drift, sign, target_playback_time
from controller.enums.phase import CorrectionPhase
from controller.enums.skip_reason import SkipReason
from controller.enums.strategy import Strategy
from controller.events import (
    Activated,
    Deactivated,
    DeviceSnapshot,
    Event,
    SourceChanged,
    StrategyChanged,
    Tick,
)
from controller.state_dataclass import ControllerState
from controller.sync_config import SyncConfig
from controller.telemetry import TelemetrySnapshot, render_telemetry
from spec import (
    ADJUSTMENT_STEP,
    DRIFT_CORRECT_THRESHOLD_S,
    DRIFT_STOP_THRESHOLD_S,
    HARD_JUMP_THRESHOLD_S,
    PITCH_STEP_DIRECTION,
    PITCH_STEP_MULTIPLIER,
    REFERENCE_TIME_NEVER_SEEN,
    TELEMETRY_PUBLISH_INTERVAL_S,
    TIME_SET_DEAD_ZONE_FACTOR,
    TIMESCALE_STEP_DIRECTION,
    TIMESCALE_STEP_MULTIPLIER,
)


Result = tuple[ControllerState, tuple[Command, ...]]

LOG_LEVEL_INFO = "info"
LOG_LEVEL_DEBUG = "debug"


# =============================================================================
# Small helpers
# =============================================================================

def _log(
    state: ControllerState,
    event: Event,
    decision: str,
    details: dict[str, Any] | None = None,
    *,
    strategy: Strategy | None = None,
    level: str = LOG_LEVEL_INFO,
) -> LogEvent:
    return LogEvent(
        event={
            "ts_ms": event.ts_ms,
            "level": level,
            "event_type": event.event_type.value,
            "decision": decision,
            "strategy": strategy.value if strategy is not None else None,
            "phase": state.phase.value,
            "current_adjustment": state.current_adjustment,
            "details": details or {},
        }
    )


def _metric(name: str, value: float, strategy: Strategy) -> RecordMetric:
    return RecordMetric(name=name, value=value, tags=(("strategy", strategy.value),))


def _baseline_timescale(state: ControllerState, config: SyncConfig) -> float:
    if config.target_timescale is not None:
        return config.target_timescale
    return state.original_timescale


def _pinned_timescale(config: SyncConfig | None) -> float | None:
    """Timescale the TIME_SCALE strategy must hold the knob at, if pinned."""
    if config is None or config.strategy is not Strategy.TIME_SCALE:
        return None
    return config.target_timescale


def _original_rate(state: ControllerState, device: DeviceSnapshot) -> float:
    if state.original_rate is not None:
        return state.original_rate
    return device.rate


def _knob_command(
    strategy: Strategy,
    state: ControllerState,
    config: SyncConfig,
    device: DeviceSnapshot,
    adjustment: float,
) -> Command:
    """Command that puts the strategy's knob at baseline + adjustment."""
    if strategy is Strategy.AUDIO_PITCH:
        return SetPlaybackRate(rate=_original_rate(state, device) + adjustment)
    return SetTimescale(scale=_baseline_timescale(state, config) + adjustment)


def _step(strategy: Strategy, drift: float, delta_time: float) -> float:
    if strategy is Strategy.AUDIO_PITCH:
        direction, multiplier = PITCH_STEP_DIRECTION, PITCH_STEP_MULTIPLIER
    else:
        direction, multiplier = TIMESCALE_STEP_DIRECTION, TIMESCALE_STEP_MULTIPLIER
    return sign(drift) * direction * ADJUSTMENT_STEP * delta_time * multiplier


def _target(reference_time: float, config: SyncConfig, device: DeviceSnapshot) -> float:
    assert device.duration_s is not None
    return target_playback_time(
        reference_time,
        offset_s=config.offset_s,
        target_timescale=config.effective_target_timescale,
        duration_s=device.duration_s,
        loops=device.loops,
    )


def _last_value(commands: list[Command], kind: type, attr: str, default: float) -> float:
    for command in reversed(commands):
        if isinstance(command, kind):
            return getattr(command, attr)
    return default


def _reset_hysteresis(state: ControllerState, *, active: bool) -> ControllerState:
    return replace(
        state,
        active=active,
        current_adjustment=0.0,
        previous_drift=0.0,
        previous_reference_time=REFERENCE_TIME_NEVER_SEEN,
        debug_accumulator=0.0,
        last_skip_reason=None,
    )


# =============================================================================
# Lifecycle
# =============================================================================

def _on_activated(state: ControllerState, event: Activated) -> Result:
    """
    Capture the originals and start fresh.

    Re-activating an active controller keeps the first capture: the knobs
    read by the runtime may be bent mid-correction, so they are put back
    instead of being recorded as originals.
    """
    commands: list[Command] = []
    original_rate = event.original_rate
    original_timescale = event.original_timescale

    if state.active:
        if state.original_rate is not None:
            original_rate = state.original_rate
            commands.append(SetPlaybackRate(rate=original_rate))
        original_timescale = state.original_timescale

    pinned = _pinned_timescale(event.config)
    scale = pinned if pinned is not None else original_timescale
    if state.active or scale != event.original_timescale:
        commands.append(SetTimescale(scale=scale))

    new_state = ControllerState(
        active=True,
        original_rate=original_rate,
        original_timescale=original_timescale,
    )
    commands.append(
        _log(
            new_state,
            event,
            "activated",
            {
                "original_rate": original_rate,
                "original_timescale": original_timescale,
                "pinned_timescale": pinned,
                "was_active": state.active,
            },
        )
    )
    return new_state, tuple(commands)


def _restore_and_reset(
    state: ControllerState,
    event: Event,
    *,
    stay_active: bool,
    forget_rate: bool = False,
) -> Result:
    """
    Put rate and timescale back to their captured originals and zero every
    hysteresis field. Shared by strategy changes, source changes and teardown.
    """
    if not state.active:
        return state, (_log(state, event, "ignore", {"reason": "inactive"}),)

    commands: list[Command] = []
    if state.original_rate is not None:
        commands.append(SetPlaybackRate(rate=state.original_rate))
    commands.append(SetTimescale(scale=state.original_timescale))

    new_state = _reset_hysteresis(state, active=stay_active)
    if forget_rate:
        new_state = replace(new_state, original_rate=None)
    commands.append(
        _log(
            new_state,
            event,
            "restored",
            {
                "original_rate": state.original_rate,
                "original_timescale": state.original_timescale,
                "released_adjustment": state.current_adjustment,
            },
        )
    )
    return new_state, tuple(commands)


# =============================================================================
# Tick
# =============================================================================

def _skip(state: ControllerState, event: Tick, reason: SkipReason) -> Result:
    # Logged once per change of reason, not every frame
    if state.last_skip_reason is reason:
        return state, ()
    new_state = replace(state, last_skip_reason=reason)
    return new_state, (_log(new_state, event, "tick_skipped", {"reason": reason.value}),)


def _seek_to_target(
    state: ControllerState,
    event: Tick,
    device: DeviceSnapshot,
    strategy: Strategy,
    target: float,
    drift: float,
    decision: str,
) -> tuple[ControllerState, list[Command], list[Command]]:
    """Hard seek; aborts any gradual correction and puts its knob back."""
    effects: list[Command] = [SeekPlayback(position=target)]
    if state.current_adjustment != 0 and strategy is not Strategy.AUDIO_TIME_SET:
        effects.append(_knob_command(strategy, state, event.config, device, 0.0))

    new_state = replace(state, current_adjustment=0.0)
    logs: list[Command] = [
        _log(
            new_state,
            event,
            decision,
            {
                "drift": drift,
                "from_position": device.position,
                "to_position": target,
                "aborted_adjustment": state.current_adjustment,
            },
            strategy=strategy,
        ),
        _metric(decision, drift, strategy),
    ]
    return new_state, effects, logs


def _handle_time_set(
    state: ControllerState,
    event: Tick,
    device: DeviceSnapshot,
    target: float,
    drift: float,
) -> tuple[ControllerState, list[Command], list[Command]]:
    if abs(drift) >= DRIFT_CORRECT_THRESHOLD_S * TIME_SET_DEAD_ZONE_FACTOR:
        return _seek_to_target(
            state, event, device, Strategy.AUDIO_TIME_SET, target, drift, "time_set_seek"
        )
    return state, [], [
        _log(state, event, "hold", {"drift": drift},
             strategy=Strategy.AUDIO_TIME_SET, level=LOG_LEVEL_DEBUG),
    ]


def _handle_gradual(
    state: ControllerState,
    event: Tick,
    device: DeviceSnapshot,
    strategy: Strategy,
    drift: float,
) -> tuple[ControllerState, list[Command], list[Command]]:
    """
    Hysteresis shared by AUDIO_PITCH and TIME_SCALE.

    - idle -> correcting once |drift| reaches the correct threshold
    - correcting -> idle once |drift| falls to the stop threshold
    - while correcting, only a growing |drift| adds another step;
      a shrinking drift leaves the adjustment alone
    """
    config = event.config
    drift_abs = abs(drift)
    previous_abs = abs(state.previous_drift)

    if state.phase is CorrectionPhase.IDLE:
        if drift_abs < DRIFT_CORRECT_THRESHOLD_S:
            return state, [], [
                _log(state, event, "hold", {"drift": drift},
                     strategy=strategy, level=LOG_LEVEL_DEBUG),
            ]
        step = _step(strategy, drift, event.delta_time)
        adjustment = state.current_adjustment + step
        new_state = replace(state, current_adjustment=adjustment)
        return new_state, [
            _knob_command(strategy, state, config, device, adjustment),
        ], [
            _log(new_state, event, "correction_started",
                 {"drift": drift, "step": step}, strategy=strategy),
            _metric("correction_started", drift, strategy),
        ]

    if drift_abs <= DRIFT_STOP_THRESHOLD_S:
        new_state = replace(state, current_adjustment=0.0)
        return new_state, [
            _knob_command(strategy, state, config, device, 0.0),
        ], [
            _log(new_state, event, "correction_released",
                 {"drift": drift, "released_adjustment": state.current_adjustment},
                 strategy=strategy),
            _metric("correction_released", drift, strategy),
        ]

    if drift_abs != previous_abs and drift_abs > previous_abs:
        step = _step(strategy, drift, event.delta_time)
        adjustment = state.current_adjustment + step
        new_state = replace(state, current_adjustment=adjustment)
        return new_state, [
            _knob_command(strategy, state, config, device, adjustment),
        ], [
            _log(new_state, event, "correction_strengthened",
                 {"drift": drift, "previous_drift": state.previous_drift, "step": step},
                 strategy=strategy),
        ]

    return state, [], [
        _log(state, event, "hold", {"drift": drift, "previous_drift": state.previous_drift},
             strategy=strategy, level=LOG_LEVEL_DEBUG),
    ]


def _on_tick(state: ControllerState, event: Tick) -> Result:
    # --------------------------------------------------------------
    # Skips (non-fatal, retried next frame)
    # --------------------------------------------------------------
    if not state.active:
        return _skip(state, event, SkipReason.INACTIVE)
    if event.host_frozen or event.reference_time is None:
        return _skip(state, event, SkipReason.HOST_FROZEN)
    device = event.device
    if device is None:
        return _skip(state, event, SkipReason.DEVICE_UNAVAILABLE)
    if not device.has_clip:
        return _skip(state, event, SkipReason.CLIP_UNKNOWN)
    config = event.config
    strategy = config.strategy
    if strategy is None:
        return _skip(state, event, SkipReason.CONFIG_INCOMPLETE)

    logs: list[Command] = []
    if state.last_skip_reason is not None:
        logs.append(
            _log(state, event, "tick_resumed", {"after": state.last_skip_reason.value})
        )
        state = replace(state, last_skip_reason=None)
    if state.original_rate is None:
        state = replace(state, original_rate=device.rate)
        logs.append(_log(state, event, "original_rate_captured", {"rate": device.rate}))

    reference_time = event.reference_time

    # --------------------------------------------------------------
    # Timeline stopped: hysteresis stays frozen
    # --------------------------------------------------------------
    if reference_time == state.previous_reference_time:
        if config.stop_if_animation_stopped and device.is_playing:
            logs.append(_log(state, event, "paused", {"reference_time": reference_time}))
            return state, (PausePlayback(), *logs)
        return state, tuple(logs)

    target = _target(reference_time, config, device)
    drift = compute_drift(device.position, target)

    effects: list[Command] = []

    # --------------------------------------------------------------
    # Playback device idle
    # --------------------------------------------------------------
    if not device.is_playing:
        if config.stop_if_animation_stopped and abs(drift) != 0:
            effects.append(ResumePlayback())
            logs.append(_log(state, event, "resumed", {"drift": drift}))
        else:
            if device.position != 0:
                logs.append(
                    _log(state, event, "reset_to_start", {"from_position": device.position})
                )
            return state, (SeekPlayback(position=0.0), *logs)

    # --------------------------------------------------------------
    # Correction
    # --------------------------------------------------------------
    if config.jump_if_too_far and abs(drift) > HARD_JUMP_THRESHOLD_S:
        state, strategy_effects, strategy_logs = _seek_to_target(
            state, event, device, strategy, target, drift, "hard_jump"
        )
    elif strategy is Strategy.AUDIO_TIME_SET:
        state, strategy_effects, strategy_logs = _handle_time_set(
            state, event, device, target, drift
        )
    else:
        state, strategy_effects, strategy_logs = _handle_gradual(
            state, event, device, strategy, drift
        )
    effects.extend(strategy_effects)
    logs.extend(strategy_logs)

    # Pinned target: knob must sit at baseline + adjustment even while idle
    pinned = _pinned_timescale(config)
    if pinned is not None:
        expected = pinned + state.current_adjustment
        current = _last_value(effects, SetTimescale, "scale", event.timescale)
        if not math.isclose(current, expected, rel_tol=0.0, abs_tol=1e-9):
            effects.append(SetTimescale(scale=expected))
            logs.append(
                _log(state, event, "timescale_pinned", {"from": current, "to": expected},
                     strategy=strategy)
            )

    state = replace(state, previous_drift=drift, previous_reference_time=reference_time)

    # --------------------------------------------------------------
    # Telemetry (throttled, only while someone is looking)
    # --------------------------------------------------------------
    if event.debug_surface_active:
        accumulator = state.debug_accumulator + event.delta_time
        if accumulator > TELEMETRY_PUBLISH_INTERVAL_S:
            snapshot = TelemetrySnapshot(
                reference_time=reference_time,
                drift=drift,
                current_adjustment=state.current_adjustment,
                timescale=_last_value(effects, SetTimescale, "scale", event.timescale),
                rate=_last_value(effects, SetPlaybackRate, "rate", device.rate),
            )
            effects.append(PublishTelemetry(text=render_telemetry(snapshot)))
            accumulator = 0.0
        state = replace(state, debug_accumulator=accumulator)

    return state, tuple(effects + logs)


# =============================================================================
# Reducer
# =============================================================================

def reduce(state: ControllerState, event: Event) -> Result:
    """
    Pure reducer for the drift controller.

    Given the current controller state and a single event, returns:
    - the next state
    - a tuple of commands describing required side effects,
      effects first, observability last
    """
    if isinstance(event, Tick):
        return _on_tick(state, event)

    if isinstance(event, Activated):
        return _on_activated(state, event)

    if isinstance(event, StrategyChanged):
        return _restore_and_reset(state, event, stay_active=True)

    if isinstance(event, Deactivated):
        return _restore_and_reset(state, event, stay_active=False)

    if isinstance(event, SourceChanged):
        return _restore_and_reset(state, event, stay_active=True, forget_rate=True)

    return state, (_log(state, event, "ignore", {"reason": "unhandled_event"}),)
