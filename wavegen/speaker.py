"""Live delivery buffer between a sample producer and a frame-paced device.

The producer calls ``write``/``extend`` at whatever pace it likes; a single
background flusher drains the pending queue into fixed-size device frames.
Each flush pass encodes at most one frame worth of samples, in FIFO order,
at the frame offset matching their queue index. Samples that do not fit stay
queued for the next pass. Frame slots a short pass does not overwrite keep
the bytes of the previous pass unless ``zero_fill`` is set.

The device write happens outside the queue lock: a frame is encoded under
the lock, copied, and submitted after the lock is released, so a slow device
never stalls ``write``. Submissions are serialized by a second lock so
frames reach the device in encode order.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Iterable
from types import TracebackType

from .audio import BYTES_PER_STEREO_FRAME, encode_stereo
from .device import AudioDevice, DeviceOpener, open_device
from .envelopes import EnvelopeStream
from .errors import PlaybackError
from .oscillator import Oscillator
from .render import ShortEnvelopePolicy, apply_short_envelope_policy, iter_samples, total_samples
from .waveforms import Shape

_LOGGER = logging.getLogger("wavegen.speaker")

StereoSample = tuple[float, float]


class DeliveryBuffer:
    def __init__(
        self,
        sample_rate: int,
        frame_size: int,
        *,
        device: AudioDevice | None = None,
        opener: DeviceOpener = open_device,
        zero_fill: bool = False,
        autostart: bool = True,
    ) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        if frame_size <= 0:
            raise ValueError(f"frame_size must be positive, got {frame_size}")
        self.sample_rate = sample_rate
        self.frame_size = frame_size
        self.zero_fill = zero_fill

        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)
        self._submit_lock = threading.Lock()
        self._pending: deque[StereoSample] = deque()
        self._frame = bytearray(frame_size * BYTES_PER_STEREO_FRAME)
        self._in_flight = False
        self._closing = False
        self._device_released = False
        self._error: BaseException | None = None
        self._frames_written = 0
        self._thread: threading.Thread | None = None

        self._device = device if device is not None else opener(sample_rate, frame_size)
        if autostart:
            self.start()

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> None:
        with self._lock:
            if self._closing:
                raise PlaybackError("delivery buffer is closed")
            if self._thread is not None:
                return
            self._thread = threading.Thread(
                target=self._run, name="wavegen-flush", daemon=True
            )
            self._thread.start()

    def close(self) -> None:
        """Stop the flusher and release the device. Safe to call repeatedly."""
        with self._changed:
            first = not self._closing
            self._closing = True
            dropped = len(self._pending)
            self._changed.notify_all()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        if first and dropped:
            _LOGGER.debug("Closing with %d samples still pending", dropped)
        self._release_device()

    def _release_device(self) -> None:
        # Waits out a flush_once() submitting from another thread.
        with self._submit_lock, self._lock:
            if self._device_released:
                return
            self._device_released = True
        self._device.close()
        _LOGGER.debug("Released output device after %d frames", self._frames_written)

    def __enter__(self) -> "DeliveryBuffer":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -- producer side -----------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closing

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def frames_written(self) -> int:
        return self._frames_written

    def _check_writable(self) -> None:
        if self._error is not None:
            raise PlaybackError(f"audio device failed: {self._error}") from self._error
        if self._closing:
            raise PlaybackError("delivery buffer is closed")

    def write(self, left: float, right: float | None = None) -> None:
        """Queue one stereo pair; a lone value is duplicated to both channels."""
        pair = (left, left if right is None else right)
        with self._changed:
            self._check_writable()
            self._pending.append(pair)
            self._changed.notify_all()

    def extend(self, samples: Iterable[StereoSample]) -> None:
        batch = list(samples)
        if not batch:
            return
        with self._changed:
            self._check_writable()
            self._pending.extend(batch)
            self._changed.notify_all()

    def drain(self, timeout: float | None = None) -> bool:
        """Block until every queued sample has been submitted to the device.

        Returns False when ``timeout`` expires or the buffer closes first.
        Raises ``PlaybackError`` when samples are pending but no flusher was started.
        """
        with self._changed:
            if self._thread is None and self._pending:
                raise PlaybackError("delivery buffer has pending samples but was never started")
            self._changed.wait_for(
                lambda: self._error is not None
                or self._closing
                or (not self._pending and not self._in_flight),
                timeout=timeout,
            )
            if self._error is not None:
                raise PlaybackError(f"audio device failed: {self._error}") from self._error
            return not self._pending and not self._in_flight

    # -- flusher side ------------------------------------------------------

    def _encode_pending(self) -> tuple[bytes, int]:
        capacity = self.frame_size
        encoded = 0
        while self._pending and encoded < capacity:
            left, right = self._pending.popleft()
            offset = encoded * BYTES_PER_STEREO_FRAME
            self._frame[offset : offset + BYTES_PER_STEREO_FRAME] = encode_stereo(left, right)
            encoded += 1
        if self.zero_fill and encoded < capacity:
            start = encoded * BYTES_PER_STEREO_FRAME
            self._frame[start:] = bytes(len(self._frame) - start)
        return bytes(self._frame), encoded

    def flush_once(self) -> int:
        """Encode up to one frame of pending samples and submit it.

        Returns the number of samples consumed. Device errors propagate.
        """
        return self._flush(record_error=False)

    def _flush(self, *, record_error: bool) -> int:
        with self._submit_lock:
            with self._changed:
                if self._closing or self._device_released:
                    raise PlaybackError("delivery buffer is closed")
                frame, encoded = self._encode_pending()
                self._in_flight = True
            failure: BaseException | None = None
            try:
                self._device.write(frame)
                self._frames_written += 1
            except Exception as exc:
                failure = exc
                raise
            finally:
                # Error and in-flight state change together so drain() never
                # sees an idle buffer between them.
                with self._changed:
                    self._in_flight = False
                    if record_error and failure is not None:
                        self._error = failure
                    self._changed.notify_all()
        return encoded

    def _run(self) -> None:
        _LOGGER.debug("Flusher started (frame=%d samples)", self.frame_size)
        while True:
            with self._changed:
                self._changed.wait_for(lambda: self._closing or bool(self._pending))
                if self._closing:
                    break
            try:
                self._flush(record_error=True)
            except Exception as exc:
                if self._error is None and self._closing:
                    # close() won the race for the next pass.
                    break
                _LOGGER.error("Device write failed; stopping flusher: %s", exc, exc_info=True)
                return
        _LOGGER.debug("Flusher stopped")


def play(
    duration: float,
    shape: Shape | str,
    amplitude: EnvelopeStream,
    frequency: EnvelopeStream,
    buffer: DeliveryBuffer,
    *,
    on_short_envelope: ShortEnvelopePolicy = "error",
    chunk_size: int | None = None,
) -> int:
    """Tick an oscillator for ``duration`` seconds into ``buffer`` and wait for it to drain.

    The buffer stays open; its owner closes it. Returns the number of samples produced.
    """
    amplitude, frequency = apply_short_envelope_policy(amplitude, frequency, on_short_envelope)
    count = total_samples(duration, buffer.sample_rate)
    osc = Oscillator(buffer.sample_rate, shape)
    chunk = chunk_size or buffer.frame_size
    batch: list[StereoSample] = []
    for value in iter_samples(count, osc, amplitude, frequency):
        batch.append((value, value))
        if len(batch) >= chunk:
            buffer.extend(batch)
            batch = []
    buffer.extend(batch)
    if not buffer.drain():
        raise PlaybackError("delivery buffer closed before playback finished")
    _LOGGER.info("Played %d samples (%s)", count, osc.shape.value)
    return count
