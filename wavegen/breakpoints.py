"""Breakpoint files: sparse ``time value`` pairs turned into per-sample streams.

A breakpoint file holds one pair per line, whitespace separated::

    # seconds  value
    0.0   0.0
    0.5   1.0
    2.0   0.25

Times are seconds from the start of the render, non-negative and
non-decreasing. ``BreakpointStream`` interpolates linearly between
neighbouring points, holding the first value before the first time and the
last value after the last time.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .errors import BreakpointError

_LOGGER = logging.getLogger("wavegen.breakpoints")


@dataclass(frozen=True, slots=True)
class Breakpoint:
    time: float
    value: float


def parse_breakpoints(text: str, *, source: str = "<string>") -> list[Breakpoint]:
    points: list[Breakpoint] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        fields = line.split()
        if len(fields) != 2:
            raise BreakpointError(
                f"{source}:{lineno}: expected 'time value', got {raw.strip()!r}"
            )
        try:
            time, value = float(fields[0]), float(fields[1])
        except ValueError as exc:
            raise BreakpointError(f"{source}:{lineno}: {exc}") from exc
        if not (math.isfinite(time) and math.isfinite(value)):
            raise BreakpointError(f"{source}:{lineno}: non-finite breakpoint {raw.strip()!r}")
        if time < 0:
            raise BreakpointError(f"{source}:{lineno}: negative time {time}")
        if points and time < points[-1].time:
            raise BreakpointError(
                f"{source}:{lineno}: time {time} is before previous time {points[-1].time}"
            )
        points.append(Breakpoint(time, value))
    if not points:
        raise BreakpointError(f"{source}: no breakpoints found")
    return points


def load_breakpoints(path: str | Path) -> list[Breakpoint]:
    target = Path(path)
    try:
        text = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BreakpointError(f"cannot read breakpoint file {target}: {exc}") from exc
    points = parse_breakpoints(text, source=str(target))
    _LOGGER.debug("Loaded %d breakpoints from %s", len(points), target)
    return points


class BreakpointStream:
    """Linear interpolation over breakpoints, advanced one sample per tick."""

    def __init__(self, points: Sequence[Breakpoint], sample_rate: int) -> None:
        if not points:
            raise BreakpointError("breakpoint stream needs at least one point")
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self._points = tuple(points)
        self._sample_rate = sample_rate
        self._ticks = 0
        self._position = 0.0
        self._right = 0
        self._seek()

    @classmethod
    def from_file(cls, path: str | Path, sample_rate: int) -> "BreakpointStream":
        return cls(load_breakpoints(path), sample_rate)

    @property
    def position(self) -> float:
        return self._position

    def _seek(self) -> None:
        # First point strictly after the current position, or len(points).
        while self._right < len(self._points) and self._points[self._right].time <= self._position:
            self._right += 1

    def _value(self) -> float:
        if self._right == 0:
            return self._points[0].value
        if self._right >= len(self._points):
            return self._points[-1].value
        left = self._points[self._right - 1]
        right = self._points[self._right]
        span = right.time - left.time
        fraction = (self._position - left.time) / span
        return left.value + (right.value - left.value) * fraction

    def tick(self) -> float:
        value = self._value()
        self._ticks += 1
        self._position = self._ticks / self._sample_rate
        self._seek()
        return value
