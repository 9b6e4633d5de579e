from __future__ import annotations

from .audio import SAMPLE_RATE, WaveFormat, encode_stereo, quantize, quantize_array, write_frames
from .breakpoints import Breakpoint, BreakpointStream, load_breakpoints, parse_breakpoints
from .config import PlaybackSettings, RenderSettings
from .device import AudioDevice, open_device
from .envelopes import ConstantEnvelope, EnvelopeStream, SampleEnvelope
from .errors import (
    AudioFileError,
    BreakpointError,
    EnvelopeExhaustedError,
    InvalidSettingsError,
    PlaybackError,
    UnknownShapeError,
    WavegenError,
)
from .logging_utils import configure_logging as _configure_logging
from .oscillator import Oscillator
from .render import render
from .speaker import DeliveryBuffer, play
from .waveforms import Shape, parse_shape, waveform_for

__all__ = [
    "SAMPLE_RATE",
    "AudioDevice",
    "AudioFileError",
    "Breakpoint",
    "BreakpointError",
    "BreakpointStream",
    "ConstantEnvelope",
    "DeliveryBuffer",
    "EnvelopeExhaustedError",
    "EnvelopeStream",
    "InvalidSettingsError",
    "Oscillator",
    "PlaybackError",
    "PlaybackSettings",
    "RenderSettings",
    "SampleEnvelope",
    "Shape",
    "UnknownShapeError",
    "WaveFormat",
    "WavegenError",
    "encode_stereo",
    "load_breakpoints",
    "open_device",
    "parse_breakpoints",
    "parse_shape",
    "play",
    "quantize",
    "quantize_array",
    "render",
    "waveform_for",
    "write_frames",
]

__version__ = "0.1.0"

_configure_logging()
del _configure_logging
