# pylint: disable=missing-module-docstring,missing-function-docstring
import pytest

from controller.commands import LogEvent, SetPlaybackRate, SetTimescale
from controller.enums.skip_reason import SkipReason
from controller.enums.strategy import Strategy
from controller.events import (
    Activated,
    Deactivated,
    EventType,
    SourceChanged,
    StrategyChanged,
)
from controller.reducer import reduce
from controller.state_dataclass import ControllerState
from controller.sync_config import SyncConfig
from spec import REFERENCE_TIME_NEVER_SEEN


def activated(
    rate: float | None = 1.0, timescale: float = 1.0, config: SyncConfig | None = None
) -> Activated:
    return Activated(
        event_type=EventType.ACTIVATED,
        ts_ms=0,
        original_rate=rate,
        original_timescale=timescale,
        config=config,
    )


def strategy_changed() -> StrategyChanged:
    return StrategyChanged(event_type=EventType.STRATEGY_CHANGED, ts_ms=0)


def deactivated() -> Deactivated:
    return Deactivated(event_type=EventType.DEACTIVATED, ts_ms=0)


def source_changed() -> SourceChanged:
    return SourceChanged(event_type=EventType.SOURCE_CHANGED, ts_ms=0)


def mid_correction() -> ControllerState:
    return ControllerState(
        active=True,
        original_rate=1.1,
        original_timescale=0.8,
        current_adjustment=0.07,
        previous_drift=0.2,
        previous_reference_time=12.5,
        debug_accumulator=0.2,
        last_skip_reason=SkipReason.CLIP_UNKNOWN,
    )


def test_activate_captures_originals_and_starts_fresh():
    state, commands = reduce(ControllerState(), activated(rate=0.9, timescale=1.25))

    assert state.active
    assert state.original_rate == 0.9
    assert state.original_timescale == 1.25
    assert state.current_adjustment == 0.0
    assert state.previous_reference_time == REFERENCE_TIME_NEVER_SEEN
    assert all(isinstance(c, LogEvent) for c in commands)


def test_reactivate_keeps_first_capture_and_restores_knobs():
    # Knobs read mid-correction must not become the new originals
    state, commands = reduce(mid_correction(), activated(rate=1.15, timescale=0.87))

    assert state.original_rate == 1.1
    assert state.original_timescale == 0.8
    assert state.current_adjustment == 0.0
    assert SetPlaybackRate(rate=1.1) in commands
    assert SetTimescale(scale=0.8) in commands
    assert commands[-1].event["details"]["was_active"] is True


def test_reactivate_after_source_change_takes_new_device_rate():
    state, _ = reduce(mid_correction(), source_changed())

    state, commands = reduce(state, activated(rate=0.7, timescale=0.8))

    assert state.original_rate == 0.7
    assert not any(isinstance(c, SetPlaybackRate) for c in commands)


def test_activate_with_pinned_target_applies_it_immediately():
    config = SyncConfig(strategy=Strategy.TIME_SCALE, target_timescale=0.5)

    state, commands = reduce(ControllerState(), activated(timescale=1.0, config=config))

    assert state.original_timescale == 1.0
    assert SetTimescale(scale=0.5) in commands


@pytest.mark.parametrize("strategy", [Strategy.AUDIO_PITCH, Strategy.AUDIO_TIME_SET])
def test_pinned_target_left_alone_by_other_strategies(strategy):
    config = SyncConfig(strategy=strategy, target_timescale=0.5)

    _, commands = reduce(ControllerState(), activated(timescale=1.0, config=config))

    assert not any(isinstance(c, SetTimescale) for c in commands)


@pytest.mark.parametrize("event_factory", [strategy_changed, deactivated, source_changed])
def test_restore_puts_knobs_back_and_resets_hysteresis(event_factory):
    state, commands = reduce(mid_correction(), event_factory())

    assert SetPlaybackRate(rate=1.1) in commands
    assert SetTimescale(scale=0.8) in commands
    assert state.current_adjustment == 0.0
    assert state.previous_drift == 0.0
    assert state.previous_reference_time == REFERENCE_TIME_NEVER_SEEN
    assert state.debug_accumulator == 0.0
    assert state.last_skip_reason is None


def test_strategy_change_keeps_controller_active():
    state, _ = reduce(mid_correction(), strategy_changed())
    assert state.active
    assert state.original_rate == 1.1


def test_deactivate_detaches():
    state, _ = reduce(mid_correction(), deactivated())
    assert not state.active


def test_source_change_forgets_captured_rate():
    state, _ = reduce(mid_correction(), source_changed())
    assert state.active
    assert state.original_rate is None
    assert state.original_timescale == 0.8


def test_restore_without_captured_rate_only_touches_timescale():
    state = ControllerState(active=True, original_rate=None, original_timescale=1.0)

    _, commands = reduce(state, strategy_changed())

    assert not any(isinstance(c, SetPlaybackRate) for c in commands)
    assert SetTimescale(scale=1.0) in commands


def test_restore_when_inactive_is_ignored():
    state = ControllerState()

    new_state, commands = reduce(state, deactivated())

    assert new_state == state
    assert [c.event["decision"] for c in commands] == ["ignore"]
