from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import AudioFileError

_LOGGER = logging.getLogger("wavegen.audio")

SAMPLE_RATE = 44_100
INT16_SCALE = (1 << 15) - 1
BYTES_PER_STEREO_FRAME = 4

AudioNumbers = NDArray[np.floating[Any]] | Sequence[float]


class WaveFormat(BaseModel):
    """Linear PCM layout handed to the file writer."""

    channels: int = Field(default=1, ge=1, le=2)
    bytes_per_sample: int = 2
    sample_rate: int = Field(default=SAMPLE_RATE, gt=0)
    bits_per_sample: int = 16

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_pcm16(self) -> "WaveFormat":
        if self.bits_per_sample != 16 or self.bytes_per_sample != 2:
            raise ValueError("only 16-bit linear PCM is supported")
        return self

    @property
    def block_align(self) -> int:
        return self.channels * self.bytes_per_sample


def quantize(value: float) -> int:
    """Clamp to [-1, 1] and scale to a signed 16-bit integer."""
    clamped = min(max(value, -1.0), 1.0)
    return int(round(clamped * INT16_SCALE))


def quantize_array(samples: AudioNumbers) -> NDArray[np.int16]:
    clipped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    return np.round(clipped * INT16_SCALE).astype(np.int16)


def encode_stereo(left: float, right: float) -> bytes:
    """Encode one stereo pair as four little-endian bytes."""
    return quantize(left).to_bytes(2, "little", signed=True) + quantize(right).to_bytes(
        2, "little", signed=True
    )


def write_frames(samples: AudioNumbers, fmt: WaveFormat, path: str | Path) -> Path:
    """Write a finished mono sample sequence as a 16-bit PCM WAV file.

    Mono input is duplicated across channels when ``fmt.channels`` is 2.
    """
    target = Path(path)
    pcm = quantize_array(samples).reshape(-1)
    if fmt.channels == 2:
        pcm = np.repeat(pcm[:, np.newaxis], 2, axis=1)
    try:
        sf.write(target, pcm, fmt.sample_rate, subtype="PCM_16", format="WAV")
    except RuntimeError as exc:
        raise AudioFileError(f"cannot write {target}: {exc}") from exc
    _LOGGER.info("Wrote %d frames to %s", pcm.shape[0], target)
    return target
