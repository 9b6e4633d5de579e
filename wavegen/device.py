from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from .audio import BYTES_PER_STEREO_FRAME
from .errors import PlaybackError

_LOGGER = logging.getLogger("wavegen.device")


class AudioDevice(Protocol):
    """Blocking sink for whole device frames of interleaved stereo int16."""

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...


DeviceOpener = Callable[[int, int], AudioDevice]


class SounddeviceOutput:
    """Stereo 16-bit output through a sounddevice raw stream."""

    def __init__(self, stream: Any, frame_size: int) -> None:
        self._stream = stream
        self._frame_bytes = frame_size * BYTES_PER_STEREO_FRAME
        self._closed = False

    def write(self, data: bytes) -> None:
        if len(data) != self._frame_bytes:
            raise PlaybackError(f"expected {self._frame_bytes} bytes per frame, got {len(data)}")
        underflowed = self._stream.write(data)
        if underflowed:
            _LOGGER.debug("Output underflow while writing device frame")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.stop()
        finally:
            self._stream.close()


def _load_sounddevice() -> Any | None:
    try:
        import sounddevice as sd_module  # type: ignore[import]
    except (ImportError, OSError) as exc:
        # OSError: the module imports but PortAudio itself is missing.
        _LOGGER.info("sounddevice not available: %s", exc, exc_info=True)
        return None
    return sd_module


def open_device(sample_rate: int, frame_size: int) -> AudioDevice:
    """Open the default output device for stereo int16 frames."""
    sd = _load_sounddevice()
    if sd is None:
        raise PlaybackError(
            "Live playback requires sounddevice and PortAudio. Install them or render to a file."
        )
    try:
        stream = sd.RawOutputStream(
            samplerate=sample_rate,
            channels=2,
            dtype="int16",
            blocksize=frame_size,
        )
        stream.start()
    except Exception as exc:
        raise PlaybackError(f"cannot open audio device: {exc}") from exc
    _LOGGER.info("Opened output device (sr=%d, frame=%d samples)", sample_rate, frame_size)
    return SounddeviceOutput(stream, frame_size)
