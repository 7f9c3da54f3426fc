# pylint: disable=missing-module-docstring,missing-function-docstring

from controller.commands import LogEvent, RecordMetric
from controller.enums.strategy import Strategy
from controller.events import DeviceSnapshot, EventType, Tick
from controller.reducer import reduce
from controller.state_dataclass import ControllerState
from controller.sync_config import SyncConfig


def correcting_tick() -> Tick:
    return Tick(
        event_type=EventType.TICK,
        ts_ms=123,
        delta_time=0.1,
        config=SyncConfig(strategy=Strategy.TIME_SCALE),
        timescale=1.0,
        reference_time=5.0,
        device=DeviceSnapshot(
            position=5.2, rate=1.0, is_playing=True, duration_s=30.0, loops=False
        ),
    )


def test_reducer_emits_logevent_with_required_fields():
    state = ControllerState(active=True, original_rate=1.0, original_timescale=1.0)

    _, commands = reduce(state, correcting_tick())

    log_events = [c for c in commands if isinstance(c, LogEvent)]
    assert log_events, "Reducer must emit at least one LogEvent"

    payload = log_events[0].event

    for key in ("ts_ms", "level", "event_type", "decision", "strategy", "phase", "details"):
        assert key in payload

    assert payload["ts_ms"] == 123
    assert payload["event_type"] == "TICK"
    assert payload["decision"] == "correction_started"
    assert payload["strategy"] == "TIME_SCALE"
    assert payload["phase"] == "CORRECTING"


def test_observability_commands_come_after_effects():
    state = ControllerState(active=True, original_rate=1.0, original_timescale=1.0)

    _, commands = reduce(state, correcting_tick())

    kinds = [isinstance(c, (LogEvent, RecordMetric)) for c in commands]
    assert kinds == sorted(kinds), "effects must precede logs/metrics"


def test_correction_start_records_metric_with_strategy_tag():
    state = ControllerState(active=True, original_rate=1.0, original_timescale=1.0)

    _, commands = reduce(state, correcting_tick())

    [metric] = [c for c in commands if isinstance(c, RecordMetric)]
    assert metric.name == "correction_started"
    assert metric.tags == (("strategy", "TIME_SCALE"),)
