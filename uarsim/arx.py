"""Discrete ARX plant model."""

from __future__ import annotations

import random
from collections import deque
from collections.abc import Sequence


class ARXModel:
    """ARX model ``y = B·u(k - delay) - A·y`` with optional Gaussian noise."""

    def __init__(
        self,
        a: Sequence[float],
        b: Sequence[float],
        delay: int = 1,
        noise: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.a: list[float] = []
        self.b: list[float] = []
        self.delay = 0
        self.noise = 0.0
        self._inputs: deque[float] = deque(maxlen=0)
        self._outputs: deque[float] = deque(maxlen=0)
        self._apply(a, b, delay, noise)
        self.reset()

    def _apply(
        self, a: Sequence[float], b: Sequence[float], delay: int, noise: float
    ) -> None:
        delay = int(delay)
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        self.a = [float(x) for x in a]
        self.b = [float(x) for x in b]
        self.delay = delay
        self.noise = float(noise)
        self._inputs = _resized(self._inputs, len(self.b) + delay)
        self._outputs = _resized(self._outputs, len(self.a))

    def simulate(self, signal: float) -> float:
        """Feed one input sample and return the new output."""
        self._inputs.appendleft(float(signal))
        inputs = list(self._inputs)
        outputs = list(self._outputs)
        y = sum(coef * u for coef, u in zip(self.b, inputs[self.delay:]))
        y -= sum(coef * past for coef, past in zip(self.a, outputs))
        if self.noise != 0:
            y += self._rng.gauss(-self.noise, self.noise)
        self._outputs.appendleft(y)
        return y

    def configure(
        self,
        a: Sequence[float],
        b: Sequence[float],
        delay: int = 0,
        noise: float = 0.0,
    ) -> None:
        """Change the coefficients, keeping the most recent history."""
        self._apply(a, b, delay, noise)

    def reset(self) -> None:
        """Clear the input and output history."""
        self._inputs = deque([0.0] * self._inputs.maxlen, maxlen=self._inputs.maxlen)
        self._outputs = deque(
            [0.0] * self._outputs.maxlen, maxlen=self._outputs.maxlen
        )


def _resized(history: deque[float], size: int) -> deque[float]:
    kept = list(history)[:size]
    kept.extend([0.0] * (size - len(kept)))
    return deque(kept, maxlen=size)