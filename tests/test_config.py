from pathlib import Path

import pytest

from wavegen.breakpoints import BreakpointStream
from wavegen.config import (
    DEFAULT_FREQUENCY,
    PlaybackSettings,
    RenderSettings,
    build_playback_settings,
    build_render_settings,
)
from wavegen.envelopes import ConstantEnvelope
from wavegen.errors import BreakpointError, InvalidSettingsError
from wavegen.waveforms import Shape


def test_render_settings_defaults() -> None:
    settings = RenderSettings()
    assert settings.duration == 10.0
    assert settings.shape is Shape.SINE
    assert settings.sample_rate == 44_100
    assert settings.wave_format.channels == 1
    assert settings.wave_format.bits_per_sample == 16


def test_shape_accepts_cli_names() -> None:
    assert build_render_settings(shape="downsaw").shape is Shape.DOWNWARD_SAWTOOTH
    assert build_render_settings(shape=Shape.SQUARE).shape is Shape.SQUARE


@pytest.mark.parametrize(
    "values",
    [
        {"shape": "noise"},
        {"duration": 0},
        {"duration": -2.0},
        {"sample_rate": 0},
        {"channels": 3},
        {"on_short_envelope": "loop"},
        {"unexpected": True},
    ],
)
def test_invalid_render_settings(values: dict[str, object]) -> None:
    with pytest.raises(InvalidSettingsError):
        build_render_settings(**values)


def test_settings_are_frozen() -> None:
    settings = RenderSettings()
    with pytest.raises(ValueError):
        settings.duration = 1.0  # type: ignore[misc]


def test_missing_envelope_paths_use_constants() -> None:
    settings = RenderSettings()
    amplitude = settings.amplitude_stream()
    frequency = settings.frequency_stream()
    assert isinstance(amplitude, ConstantEnvelope)
    assert amplitude.tick() == 1.0
    assert isinstance(frequency, ConstantEnvelope)
    assert frequency.tick() == DEFAULT_FREQUENCY


def test_envelope_paths_load_breakpoints(tmp_path: Path) -> None:
    amps = tmp_path / "amps.txt"
    amps.write_text("0 0.5\n", encoding="utf-8")
    settings = RenderSettings(amplitude_path=amps, frequency_path=tmp_path / "missing.txt")
    stream = settings.amplitude_stream()
    assert isinstance(stream, BreakpointStream)
    assert stream.tick() == 0.5
    with pytest.raises(BreakpointError):
        settings.frequency_stream()


def test_playback_settings() -> None:
    assert PlaybackSettings().frame_size == 4096
    assert build_playback_settings(frame_size=128, zero_fill=True).zero_fill
    with pytest.raises(InvalidSettingsError):
        build_playback_settings(frame_size=0)
