from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import numpy as np

from .errors import EnvelopeExhaustedError


@runtime_checkable
class EnvelopeStream(Protocol):
    """Produces one control value per output sample."""

    def tick(self) -> float: ...


class ConstantEnvelope:
    def __init__(self, value: float) -> None:
        self.value = float(value)

    def tick(self) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"ConstantEnvelope({self.value!r})"


class SampleEnvelope:
    """Finite envelope backed by precomputed per-sample values."""

    def __init__(self, values: Iterable[float]) -> None:
        self._values = np.asarray(list(values), dtype=np.float64).reshape(-1)
        self._index = 0

    def __len__(self) -> int:
        return int(self._values.size)

    @property
    def remaining(self) -> int:
        return len(self) - self._index

    def tick(self) -> float:
        if self._index >= self._values.size:
            raise EnvelopeExhaustedError(
                f"envelope exhausted after {self._values.size} values"
            )
        value = float(self._values[self._index])
        self._index += 1
        return value
