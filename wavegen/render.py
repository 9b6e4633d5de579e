from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Literal

import numpy as np
from numpy.typing import NDArray

from .envelopes import EnvelopeStream
from .errors import EnvelopeExhaustedError
from .oscillator import Oscillator
from .waveforms import Shape

_LOGGER = logging.getLogger("wavegen.render")

ShortEnvelopePolicy = Literal["error", "hold"]
FloatArray = NDArray[np.float64]


class _HeldEnvelope:
    """Repeats the last value once the wrapped stream is exhausted."""

    def __init__(self, stream: EnvelopeStream, name: str) -> None:
        self._stream = stream
        self._name = name
        self._last: float | None = None
        self.exhausted = False

    def tick(self) -> float:
        if not self.exhausted:
            try:
                self._last = self._stream.tick()
                return self._last
            except EnvelopeExhaustedError:
                if self._last is None:
                    raise
                self.exhausted = True
                _LOGGER.info("%s envelope exhausted; holding %s", self._name, self._last)
        assert self._last is not None
        return self._last


def total_samples(duration: float, sample_rate: int) -> int:
    return int(duration * sample_rate)


def apply_short_envelope_policy(
    amplitude: EnvelopeStream,
    frequency: EnvelopeStream,
    policy: ShortEnvelopePolicy,
) -> tuple[EnvelopeStream, EnvelopeStream]:
    match policy:
        case "error":
            return amplitude, frequency
        case "hold":
            return _HeldEnvelope(amplitude, "amplitude"), _HeldEnvelope(frequency, "frequency")
        case _:
            raise ValueError(f"Unknown short envelope policy: {policy!r}")


def iter_samples(
    count: int,
    osc: Oscillator,
    amplitude: EnvelopeStream,
    frequency: EnvelopeStream,
) -> Iterator[float]:
    """Yield ``count`` samples, pulling one value from each envelope per sample."""
    for _ in range(count):
        amp = amplitude.tick()
        freq = frequency.tick()
        yield amp * osc.tick(freq)


def render(
    duration: float,
    shape: Shape | str,
    amplitude: EnvelopeStream,
    frequency: EnvelopeStream,
    sample_rate: int,
    *,
    on_short_envelope: ShortEnvelopePolicy = "error",
) -> FloatArray:
    """Render ``duration`` seconds of ``shape`` shaped by the two envelopes.

    With ``on_short_envelope="error"`` a stream that runs dry raises
    ``EnvelopeExhaustedError``; ``"hold"`` keeps its last value instead.
    """
    if duration < 0:
        raise ValueError(f"duration must be non-negative, got {duration}")
    amplitude, frequency = apply_short_envelope_policy(amplitude, frequency, on_short_envelope)
    count = total_samples(duration, sample_rate)
    osc = Oscillator(sample_rate, shape)
    output: FloatArray = np.fromiter(
        iter_samples(count, osc, amplitude, frequency), dtype=np.float64, count=count
    )
    _LOGGER.debug(
        "Rendered %d samples (%s, %.3fs @ %d Hz)", count, osc.shape.value, duration, sample_rate
    )
    return output
