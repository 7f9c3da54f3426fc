# pylint: disable=missing-module-docstring,missing-function-docstring
from controller.commands import PublishTelemetry, SetTimescale
from controller.enums.strategy import Strategy
from controller.events import DeviceSnapshot, EventType, Tick
from controller.reducer import reduce
from controller.state_dataclass import ControllerState
from controller.sync_config import SyncConfig
from controller.telemetry import TelemetrySnapshot, render_telemetry


def tick(reference_time: float, position: float, *, debug: bool = True,
         delta_time: float = 0.1) -> Tick:
    return Tick(
        event_type=EventType.TICK,
        ts_ms=0,
        delta_time=delta_time,
        config=SyncConfig(strategy=Strategy.TIME_SCALE),
        timescale=1.0,
        reference_time=reference_time,
        device=DeviceSnapshot(
            position=position, rate=1.0, is_playing=True, duration_s=60.0, loops=False
        ),
        debug_surface_active=debug,
    )


def published(commands) -> list[str]:
    return [c.text for c in commands if isinstance(c, PublishTelemetry)]


def test_render_marks_drift_over_limit():
    text = render_telemetry(
        TelemetrySnapshot(
            reference_time=1.23456,
            drift=0.2,
            current_adjustment=0.05,
            timescale=1.05,
            rate=1.0,
        )
    )

    lines = text.splitlines()
    assert lines[0] == "reference time: 1.235"
    assert lines[1] == "drift: 0.200 (over limit)"
    assert "time scale: 1.0500" in lines
    assert "rate: 1.0000" in lines


def test_render_without_over_limit_marker():
    text = render_telemetry(
        TelemetrySnapshot(reference_time=0.0, drift=0.01, current_adjustment=0.0,
                          timescale=1.0, rate=1.0)
    )
    assert "(over limit)" not in text


def test_audio_lagging_behind_is_not_marked():
    text = render_telemetry(
        TelemetrySnapshot(reference_time=0.0, drift=-0.2, current_adjustment=0.0,
                          timescale=1.0, rate=1.0)
    )
    assert text.splitlines()[1] == "drift: -0.200"


def test_publish_is_throttled_to_interval():
    state = ControllerState(active=True, original_rate=1.0, original_timescale=1.0)
    texts: list[str] = []

    t = 1.0
    for _ in range(10):
        t += 0.1
        state, commands = reduce(state, tick(t, t))
        texts.extend(published(commands))

    # 0.1s ticks: accumulator passes 0.25 on every third tick
    assert len(texts) == 3
    assert state.debug_accumulator < 0.25


def test_accumulator_frozen_while_debug_surface_hidden():
    state = ControllerState(active=True, original_rate=1.0, original_timescale=1.0)

    t = 1.0
    for _ in range(10):
        t += 0.1
        state, commands = reduce(state, tick(t, t, debug=False))
        assert published(commands) == []

    assert state.debug_accumulator == 0.0


def test_snapshot_reflects_knob_set_this_tick():
    state = ControllerState(active=True, original_rate=1.0, original_timescale=1.0,
                            debug_accumulator=0.24)

    state, commands = reduce(state, tick(5.0, 5.2))

    [scale_cmd] = [c for c in commands if isinstance(c, SetTimescale)]
    [text] = published(commands)
    assert f"time scale: {scale_cmd.scale:.4f}" in text
    assert "(over limit)" in text
    assert state.debug_accumulator == 0.0
