from __future__ import annotations

from .waveforms import TAU, Shape, WaveformFn, parse_shape, waveform_for


class Oscillator:
    """Phase-accumulating oscillator producing one sample per ``tick``.

    The phase increment is cached and only recomputed when the requested
    frequency changes. Between ticks the phase stays in ``[0, TAU)``, except
    after a tick that drove it negative: it is then reset to exactly ``TAU``
    rather than wrapped, matching the reference renderer for negative
    frequencies.
    """

    __slots__ = ("_frequency", "_phase", "_increment", "_radians_per_sample", "_waveform", "shape")

    def __init__(self, sample_rate: int, shape: Shape | str) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self.shape = parse_shape(shape)
        self._waveform: WaveformFn = waveform_for(self.shape)
        self._radians_per_sample = TAU / float(sample_rate)
        self._frequency = 0.0
        self._phase = 0.0
        self._increment = 0.0

    @property
    def frequency(self) -> float:
        return self._frequency

    @property
    def phase(self) -> float:
        return self._phase

    @property
    def phase_increment(self) -> float:
        return self._increment

    def tick(self, frequency: float) -> float:
        if frequency != self._frequency:
            self._frequency = frequency
            self._increment = self._radians_per_sample * frequency

        value = self._waveform(self._phase)
        self._phase += self._increment

        if self._phase >= TAU:
            self._phase -= TAU
        if self._phase < 0.0:
            self._phase = TAU
        return value
