"""Per-shape waveform functions mapping a phase in radians to [-1, 1]."""

from __future__ import annotations

import math
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, TypeAlias

from .errors import UnknownShapeError

TAU = 2.0 * math.pi

WaveformFn: TypeAlias = Callable[[float], float]


class Shape(str, Enum):
    SINE = "sine"
    SQUARE = "square"
    TRIANGLE = "triangle"
    UPWARD_SAWTOOTH = "upsaw"
    DOWNWARD_SAWTOOTH = "downsaw"


SHAPE_NAMES: Mapping[str, Shape] = MappingProxyType({shape.value: shape for shape in Shape})


def parse_shape(name: str | Shape) -> Shape:
    """Resolve a CLI shape name (``sine``, ``upsaw`` ...) to a ``Shape``."""
    if isinstance(name, Shape):
        return name
    key = str(name).strip().lower()
    try:
        return SHAPE_NAMES[key]
    except KeyError:
        valid = ", ".join(SHAPE_NAMES)
        raise UnknownShapeError(f"Unknown shape: {name!r}. Valid: {valid}") from None


def _cycle_position(phase: float) -> float:
    # Periodic extension keeps the linear shapes bounded outside one cycle;
    # the oscillator itself only produces phases in [0, TAU].
    if 0.0 <= phase <= TAU:
        return phase / TAU
    return (phase % TAU) / TAU


def sine(phase: float) -> float:
    return math.sin(phase)


def square(phase: float) -> float:
    if 0.0 <= phase <= TAU:
        return 1.0 if phase <= math.pi else -1.0
    return 1.0 if phase % TAU <= math.pi else -1.0


def triangle(phase: float) -> float:
    ramp = abs(2.0 * _cycle_position(phase) - 1.0)
    return 2.0 * (ramp - 0.5)


def upward_sawtooth(phase: float) -> float:
    return 2.0 * _cycle_position(phase) - 1.0


def downward_sawtooth(phase: float) -> float:
    return 1.0 - 2.0 * _cycle_position(phase)


def waveform_for(shape: Shape | str) -> WaveformFn:
    """Return the waveform function for ``shape``.

    Raises ``UnknownShapeError`` for anything outside the closed ``Shape`` set,
    so a bad shape fails when an oscillator is built rather than while ticking.
    """
    match parse_shape(shape):
        case Shape.SINE:
            return sine
        case Shape.SQUARE:
            return square
        case Shape.TRIANGLE:
            return triangle
        case Shape.UPWARD_SAWTOOTH:
            return upward_sawtooth
        case Shape.DOWNWARD_SAWTOOTH:
            return downward_sawtooth
    raise UnknownShapeError(f"Shape {shape!r} not supported")
