"""
Runtime execution shell for the drift controller.

Responsibilities:
- Own controller state
- Snapshot host state into plain values once per tick
- Call the pure reducer
- Execute commands against the playback device, the timescale knob,
  the debug surface and the logger
- Guard the tick: one bad frame never escapes into the host

Non-responsibilities:
- No correction logic (reducer only)
- No device discovery (the injected resolver decides which device to use)
"""

from __future__ import annotations

import time
from typing import Any, Callable

from config import AppConfig
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
from controller.events import (
    Activated,
    Deactivated,
    DeviceSnapshot,
    Event,
    EventType,
    SourceChanged,
    StrategyChanged,
    Tick,
)
from controller.reducer import LOG_LEVEL_DEBUG, reduce
from controller.runtime_context import (
    DeviceResolver,
    HostProtocol,
    PlaybackDeviceProtocol,
    ReferenceClockProtocol,
    TelemetrySink,
    TimescaleControlProtocol,
)
from controller.state_dataclass import ControllerState
from controller.sync_config import SyncConfig
from observability.logger import log_event
from observability.metrics import record_metric

COMPONENT = "drift_controller"


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _read_device(device: PlaybackDeviceProtocol) -> DeviceSnapshot:
    duration = device.duration_s
    return DeviceSnapshot(
        position=float(device.position),
        rate=float(device.rate),
        is_playing=bool(device.is_playing),
        duration_s=None if duration is None else float(duration),
        loops=bool(device.loops),
    )


class DriftController:
    """
    Keeps a playback device in step with a reference clock.

    Architectural role:
    DriftController is the bridge between the pure reducer + immutable
    state and the imperative host (device, global timescale, debug text,
    logs). The host calls tick() once per frame on its own thread.

    Guarantees:
    - Reducer is called exactly once per lifecycle call or tick
    - Commands are executed in reducer-emitted order
    - State is committed only after every command of a tick executed;
      a tick that raises leaves the previous state in place
    - tick() never raises
    """

    def __init__(
        self,
        *,
        reference_clock: ReferenceClockProtocol,
        timescale: TimescaleControlProtocol,
        device: PlaybackDeviceProtocol | None = None,
        resolve_device: DeviceResolver | None = None,
        host: HostProtocol | None = None,
        config: SyncConfig | None = None,
        app_config: AppConfig | None = None,
        telemetry_sink: TelemetrySink | None = None,
        now_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self._clock = reference_clock
        self._timescale = timescale
        self._device = device
        self._resolve_device = resolve_device
        self._host = host
        self._config = config if config is not None else SyncConfig()
        self._app_config = app_config if app_config is not None else AppConfig.load_from_env()
        self._telemetry_sink = telemetry_sink
        self._now_ms = now_ms

        self._state = ControllerState()
        self._telemetry = ""

        # Inbound flag from the debug surface collaborator
        self.debug_surface_active = False

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> ControllerState:
        """Current immutable controller state. Treat as read-only."""
        return self._state

    @property
    def config(self) -> SyncConfig:
        return self._config

    @property
    def telemetry(self) -> str:
        """Last published debug text ("" until the first publish)."""
        return self._telemetry

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def activate(
        self,
        device: PlaybackDeviceProtocol | None = None,
        config: SyncConfig | None = None,
    ) -> None:
        """
        Attach to a session and capture the original rate and timescale.

        Must run before the first tick; restoring "original" values later
        depends on this capture. Calling it again while active keeps the
        first capture.
        """
        if device is not None:
            if self._state.active and device is not self._device:
                # Outgoing device gets its rate back before the swap
                self.on_source_config_changed()
            self._device = device
        if config is not None:
            self._config = config

        handle = self._device_handle()
        self._dispatch(
            Activated(
                event_type=EventType.ACTIVATED,
                ts_ms=self._now_ms(),
                original_rate=None if handle is None else float(handle.rate),
                original_timescale=float(self._timescale.get_scale()),
                config=self._config,
            )
        )

    def on_strategy_changed(self) -> None:
        """Restore rate and timescale and reset hysteresis."""
        self._dispatch(StrategyChanged(event_type=EventType.STRATEGY_CHANGED, ts_ms=self._now_ms()))

    def deactivate(self) -> None:
        """Restore rate and timescale and detach."""
        self._dispatch(Deactivated(event_type=EventType.DEACTIVATED, ts_ms=self._now_ms()))

    def on_source_config_changed(self) -> None:
        """
        The collaborator changed which device should be used.

        The current device gets its original rate back, then the cached
        handle is dropped so the next tick re-resolves it.
        """
        self._dispatch(SourceChanged(event_type=EventType.SOURCE_CHANGED, ts_ms=self._now_ms()))
        self._device = None

    def update_config(self, config: SyncConfig) -> None:
        """Swap the session config; a different strategy triggers a reset."""
        previous = self._config
        self._config = config
        if previous.strategy != config.strategy and self._state.active:
            self.on_strategy_changed()

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def tick(self, delta_time: float) -> None:
        """
        Run one correction step. Called once per simulation frame.

        Any exception raised while reading the host, reducing or executing
        commands is logged and swallowed at this boundary; the state from
        the previous frame stays in place.
        """
        try:
            event = self._snapshot(delta_time)
            new_state, commands = reduce(self._state, event)
            for cmd in commands:
                self._execute_command(cmd)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Writes that already ran stay applied; knob writes are absolute
            # (baseline + adjustment) so the next good tick overwrites them
            self._emit({
                "ts_ms": self._now_ms(),
                "event_type": "TICK_FAILED",
                "decision": "tick_failed",
                "error": f"{type(exc).__name__}: {exc}",
            })
            if self._resolve_device is not None:
                # The handle may have gone stale; re-resolve next frame
                self._device = None
            return

        self._state = new_state

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _device_handle(self) -> PlaybackDeviceProtocol | None:
        if self._device is None and self._resolve_device is not None:
            self._device = self._resolve_device()
        return self._device

    def _snapshot(self, delta_time: float) -> Tick:
        ts_ms = self._now_ms()
        host_frozen = self._host.is_frozen() if self._host is not None else False
        if host_frozen:
            return Tick(
                event_type=EventType.TICK,
                ts_ms=ts_ms,
                delta_time=delta_time,
                config=self._config,
                timescale=float(self._timescale.get_scale()),
                host_frozen=True,
                debug_surface_active=self.debug_surface_active,
            )

        device = self._device_handle()
        return Tick(
            event_type=EventType.TICK,
            ts_ms=ts_ms,
            delta_time=delta_time,
            config=self._config,
            timescale=float(self._timescale.get_scale()),
            reference_time=float(self._clock.current_time()),
            device=None if device is None else _read_device(device),
            debug_surface_active=self.debug_surface_active,
        )

    def _dispatch(self, event: Event) -> None:
        new_state, commands = reduce(self._state, event)
        for cmd in commands:
            self._execute_command(cmd)
        self._state = new_state

    def _execute_command(self, cmd: Command) -> None:
        """Execute a single command with side effects."""

        if isinstance(cmd, LogEvent):
            if (
                cmd.event.get("level") == LOG_LEVEL_DEBUG
                and not self._app_config.verbose_decisions
            ):
                return
            self._emit(cmd.event)

        elif isinstance(cmd, RecordMetric):
            if self._app_config.enable_metrics:
                record_metric(cmd.name, cmd.value, tags=cmd.tags, details={"component": COMPONENT})

        elif isinstance(cmd, SetTimescale):
            self._timescale.set_scale(cmd.scale)

        elif isinstance(cmd, PublishTelemetry):
            self._telemetry = cmd.text
            if self._telemetry_sink is not None:
                self._telemetry_sink(cmd.text)

        elif isinstance(cmd, (SeekPlayback, PausePlayback, ResumePlayback, SetPlaybackRate)):
            device = self._device_handle()
            if device is None:
                self._emit({
                    "ts_ms": self._now_ms(),
                    "event_type": "COMMAND_DROPPED",
                    "decision": "no_device",
                    "command_type": cmd.command_type.value,
                })
                return
            if isinstance(cmd, SeekPlayback):
                device.position = cmd.position
            elif isinstance(cmd, PausePlayback):
                device.pause()
            elif isinstance(cmd, ResumePlayback):
                device.resume()
            else:
                device.rate = cmd.rate

        else:
            raise TypeError(f"unhandled command: {type(cmd).__name__}")

    def _emit(self, event: dict[str, Any]) -> None:
        if self._app_config.enable_json_logs:
            log_event({**event, "component": COMPONENT})
