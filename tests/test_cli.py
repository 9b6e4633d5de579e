from pathlib import Path

import numpy as np
import pytest
import soundfile as sf  # type: ignore[import]

import wavegen.cli as cli
from wavegen.audio import quantize_array
from wavegen.breakpoints import BreakpointStream, load_breakpoints
from wavegen.envelopes import ConstantEnvelope
from wavegen.render import render


class _RecordingDevice:
    def __init__(self) -> None:
        self.frames: list[bytes] = []
        self.closed = 0

    def write(self, data: bytes) -> None:
        self.frames.append(data)

    def close(self) -> None:
        self.closed += 1


def test_renders_wav_with_breakpoint_envelopes(tmp_path: Path) -> None:
    amps = tmp_path / "amps.txt"
    freqs = tmp_path / "freqs.txt"
    amps.write_text("0 0\n0.05 1\n", encoding="utf-8")
    freqs.write_text("0 220\n0.1 880\n", encoding="utf-8")
    output = tmp_path / "out.wav"

    code = cli.main(
        ["-d", "0.1", "-s", "triangle", "-a", str(amps), "-f", str(freqs), "-o", str(output)]
    )

    assert code == 0
    data, sample_rate = sf.read(output, dtype="int16")
    assert sample_rate == 44_100
    assert data.shape == (4_410,)
    expected = render(
        0.1,
        "triangle",
        BreakpointStream(load_breakpoints(amps), 44_100),
        BreakpointStream(load_breakpoints(freqs), 44_100),
        44_100,
    )
    assert data.tolist() == quantize_array(expected).tolist()


def test_stereo_output(tmp_path: Path) -> None:
    output = tmp_path / "stereo.wav"
    code = cli.main(["-d", "0.01", "-s", "upsaw", "--channels", "2", "-o", str(output)])
    assert code == 0
    data, _ = sf.read(output, dtype="int16")
    assert data.shape == (441, 2)
    np.testing.assert_array_equal(data[:, 0], data[:, 1])


def test_unknown_shape_is_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-s", "noise", "-o", str(tmp_path / "x.wav")])
    assert excinfo.value.code == 2


def test_output_required_without_live() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-d", "1"])
    assert excinfo.value.code == 2


def test_missing_breakpoint_file_fails_without_output(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "out.wav"
    code = cli.main(["-d", "0.01", "-a", str(tmp_path / "nope.txt"), "-o", str(output)])
    assert code == 1
    assert not output.exists()
    assert "BreakpointError" in capsys.readouterr().err


def test_invalid_duration_fails(tmp_path: Path) -> None:
    assert cli.main(["-d", "0", "-o", str(tmp_path / "out.wav")]) == 1


def test_live_playback_uses_device(monkeypatch: pytest.MonkeyPatch) -> None:
    device = _RecordingDevice()
    opened: list[tuple[int, int]] = []

    def _opener(sample_rate: int, frame_size: int) -> _RecordingDevice:
        opened.append((sample_rate, frame_size))
        return device

    monkeypatch.setattr(cli, "open_device", _opener)

    code = cli.main(["--live", "-d", "0.02", "--sample-rate", "8000", "--frame-size", "32"])

    assert code == 0
    assert opened == [(8_000, 32)]
    assert len(device.frames) == 5
    assert all(len(frame) == 32 * 4 for frame in device.frames)
    assert device.closed == 1
    expected = render(0.02, "sine", ConstantEnvelope(1.0), ConstantEnvelope(440.0), 8_000)
    first = np.frombuffer(device.frames[0], dtype="<i2").reshape(-1, 2)[:, 0]
    assert first.tolist() == quantize_array(expected[:32]).tolist()
