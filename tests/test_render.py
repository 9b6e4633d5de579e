import numpy as np
import pytest

from wavegen.envelopes import ConstantEnvelope, SampleEnvelope
from wavegen.errors import EnvelopeExhaustedError
from wavegen.render import render, total_samples
from wavegen.waveforms import Shape


def test_render_sine_matches_closed_form() -> None:
    samples = render(1.0, Shape.SINE, ConstantEnvelope(1.0), ConstantEnvelope(440.0), 44_100)
    expected = np.sin(2 * np.pi * 440 * np.arange(44_100) / 44_100)
    assert samples.shape == (44_100,)
    assert samples.dtype == np.float64
    np.testing.assert_allclose(samples, expected, atol=1e-9)


def test_render_truncates_sample_count() -> None:
    assert total_samples(0.5, 44_100) == 22_050
    assert total_samples(0.00001, 44_100) == 0
    samples = render(0.0101, "square", ConstantEnvelope(1.0), ConstantEnvelope(100.0), 1_000)
    assert samples.size == 10


def test_render_scales_by_amplitude_envelope() -> None:
    amplitude = SampleEnvelope([0.0, 0.5, 1.0, 0.25])
    samples = render(4 / 8, Shape.SQUARE, amplitude, ConstantEnvelope(1.0), 8)
    assert samples.tolist() == [0.0, 0.5, 1.0, 0.25]


def test_render_pulls_one_value_per_sample() -> None:
    amplitude = SampleEnvelope([1.0] * 10)
    frequency = SampleEnvelope([1.0] * 12)
    render(1.0, Shape.SINE, amplitude, frequency, 10)
    assert amplitude.remaining == 0
    assert frequency.remaining == 2


def test_short_envelope_errors_by_default() -> None:
    with pytest.raises(EnvelopeExhaustedError):
        render(1.0, Shape.SINE, SampleEnvelope([1.0] * 5), ConstantEnvelope(1.0), 10)


def test_short_envelope_hold_repeats_last_value() -> None:
    samples = render(
        1.0,
        Shape.SQUARE,
        SampleEnvelope([0.1, 0.2, 0.3]),
        ConstantEnvelope(0.0),
        10,
        on_short_envelope="hold",
    )
    assert samples.tolist() == pytest.approx([0.1, 0.2, 0.3] + [0.3] * 7)


def test_hold_policy_still_fails_for_empty_envelope() -> None:
    with pytest.raises(EnvelopeExhaustedError):
        render(
            1.0,
            Shape.SINE,
            SampleEnvelope([]),
            ConstantEnvelope(1.0),
            10,
            on_short_envelope="hold",
        )


def test_unknown_policy_rejected() -> None:
    with pytest.raises(ValueError):
        render(1.0, Shape.SINE, ConstantEnvelope(1.0), ConstantEnvelope(1.0), 10,
               on_short_envelope="loop")  # type: ignore[arg-type]


def test_negative_duration_rejected() -> None:
    with pytest.raises(ValueError):
        render(-1.0, Shape.SINE, ConstantEnvelope(1.0), ConstantEnvelope(1.0), 10)
