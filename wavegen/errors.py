from __future__ import annotations


class WavegenError(Exception):
    """Base error for the wavegen library."""


class UnknownShapeError(WavegenError, ValueError):
    """Raised when a waveform shape has no generator."""


class BreakpointError(WavegenError):
    """Raised when a breakpoint file cannot be read or parsed."""


class EnvelopeExhaustedError(WavegenError):
    """Raised when a finite envelope stream runs out of values."""


class InvalidSettingsError(WavegenError):
    """Raised when render or playback settings fail validation."""


class PlaybackError(WavegenError):
    """Raised when the audio device cannot be opened or written."""


class AudioFileError(WavegenError):
    """Raised when rendered audio cannot be written to disk."""
