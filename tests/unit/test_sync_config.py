# pylint: disable=missing-module-docstring,missing-function-docstring
import math

import pytest

from controller.enums.strategy import Strategy
from controller.errors import DriftControllerError, SyncConfigError
from controller.sync_config import SyncConfig


_ENV_KEYS = (
    "SYNC_STRATEGY",
    "SYNC_OFFSET_S",
    "SYNC_TARGET_TIMESCALE",
    "SYNC_JUMP_IF_TOO_FAR",
    "SYNC_STOP_IF_ANIMATION_STOPPED",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults():
    config = SyncConfig()
    assert config.strategy is Strategy.TIME_SCALE
    assert config.offset_s == 0.0
    assert config.target_timescale is None
    assert config.effective_target_timescale == 1.0
    assert config.jump_if_too_far
    assert config.stop_if_animation_stopped


@pytest.mark.parametrize("offset", [-60.0, 0.0, 1.5, 60.0])
def test_offset_within_range_accepted(offset):
    assert SyncConfig(offset_s=offset).offset_s == offset


@pytest.mark.parametrize("offset", [-60.5, 61.0, math.nan, math.inf])
def test_offset_out_of_range_rejected(offset):
    with pytest.raises(SyncConfigError) as exc_info:
        SyncConfig(offset_s=offset)
    assert "offset_s" in str(exc_info.value)


@pytest.mark.parametrize("scale", [0.0, -1.0, math.inf, math.nan])
def test_bad_target_timescale_rejected(scale):
    with pytest.raises(SyncConfigError):
        SyncConfig(target_timescale=scale)


def test_config_error_is_a_value_error():
    with pytest.raises(ValueError):
        SyncConfig(offset_s=100.0)
    assert issubclass(SyncConfigError, DriftControllerError)


def test_pinned_target_timescale():
    assert SyncConfig(target_timescale=2.0).effective_target_timescale == 2.0


def test_load_from_env_defaults(clean_env):
    assert SyncConfig.load_from_env() == SyncConfig()


def test_load_from_env_reads_every_knob(clean_env):
    clean_env.setenv("SYNC_STRATEGY", "audio_pitch")
    clean_env.setenv("SYNC_OFFSET_S", "1.25")
    clean_env.setenv("SYNC_TARGET_TIMESCALE", "0.5")
    clean_env.setenv("SYNC_JUMP_IF_TOO_FAR", "0")
    clean_env.setenv("SYNC_STOP_IF_ANIMATION_STOPPED", "0")

    config = SyncConfig.load_from_env()

    assert config.strategy is Strategy.AUDIO_PITCH
    assert config.offset_s == 1.25
    assert config.target_timescale == 0.5
    assert not config.jump_if_too_far
    assert not config.stop_if_animation_stopped


def test_load_from_env_empty_strategy_means_unconfigured(clean_env):
    clean_env.setenv("SYNC_STRATEGY", "")
    assert SyncConfig.load_from_env().strategy is None


@pytest.mark.parametrize(
    "key, value",
    [
        ("SYNC_STRATEGY", "WOBBLE"),
        ("SYNC_OFFSET_S", "soon"),
        ("SYNC_OFFSET_S", "90"),
        ("SYNC_TARGET_TIMESCALE", "-2"),
    ],
)
def test_load_from_env_rejects_bad_values(clean_env, key, value):
    clean_env.setenv(key, value)
    with pytest.raises(SyncConfigError):
        SyncConfig.load_from_env()
