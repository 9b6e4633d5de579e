from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .audio import SAMPLE_RATE, WaveFormat
from .breakpoints import BreakpointStream
from .envelopes import ConstantEnvelope, EnvelopeStream
from .errors import InvalidSettingsError
from .render import ShortEnvelopePolicy
from .waveforms import Shape, parse_shape

_LOGGER = logging.getLogger("wavegen.config")

DEFAULT_AMPLITUDE = 1.0
DEFAULT_FREQUENCY = 440.0
DEFAULT_FRAME_SIZE = 4096


class RenderSettings(BaseModel):
    """What to render: duration, shape, envelopes and output layout."""

    duration: float = Field(default=10.0, gt=0)
    shape: Shape = Shape.SINE
    amplitude_path: Optional[Path] = None
    frequency_path: Optional[Path] = None
    output: Optional[Path] = None
    sample_rate: int = Field(default=SAMPLE_RATE, gt=0)
    channels: Literal[1, 2] = 1
    on_short_envelope: ShortEnvelopePolicy = "error"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("shape", mode="before")
    @classmethod
    def _coerce_shape(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_shape(value)
        return value

    @property
    def wave_format(self) -> WaveFormat:
        return WaveFormat(channels=self.channels, sample_rate=self.sample_rate)

    def amplitude_stream(self) -> EnvelopeStream:
        if self.amplitude_path is None:
            return ConstantEnvelope(DEFAULT_AMPLITUDE)
        return BreakpointStream.from_file(self.amplitude_path, self.sample_rate)

    def frequency_stream(self) -> EnvelopeStream:
        if self.frequency_path is None:
            return ConstantEnvelope(DEFAULT_FREQUENCY)
        return BreakpointStream.from_file(self.frequency_path, self.sample_rate)


class PlaybackSettings(BaseModel):
    """Live delivery buffer sizing."""

    sample_rate: int = Field(default=SAMPLE_RATE, gt=0)
    frame_size: int = Field(default=DEFAULT_FRAME_SIZE, gt=0)
    zero_fill: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


def build_render_settings(**values: Any) -> RenderSettings:
    try:
        return RenderSettings(**values)
    except ValidationError as exc:
        _LOGGER.debug("Rejected render settings: %s", exc)
        raise InvalidSettingsError(str(exc)) from exc


def build_playback_settings(**values: Any) -> PlaybackSettings:
    try:
        return PlaybackSettings(**values)
    except ValidationError as exc:
        _LOGGER.debug("Rejected playback settings: %s", exc)
        raise InvalidSettingsError(str(exc)) from exc
