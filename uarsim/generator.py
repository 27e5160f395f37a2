"""Setpoint signal generator."""

from __future__ import annotations

import enum
import math
from collections.abc import Sequence
from dataclasses import dataclass


class Signal(enum.Enum):
    """Shape of the generated setpoint signal."""

    STEP = "step"
    SQUARE = "square"
    SINE = "sine"
    UNSET = "unset"


@dataclass
class SetpointGenerator:
    """Produces the setpoint value for a given moment in time.

    ``activation`` is the step instant, ``amplitude`` the signal swing,
    ``period`` the period of periodic signals, ``duty`` the fill factor of
    the square wave and ``offset`` the constant component.
    """

    kind: Signal = Signal.STEP
    activation: float = 0.0
    amplitude: float = 1.0
    period: float = 1.0
    duty: float = 0.5
    offset: float = 0.0

    def generate(self, time: float) -> float:
        """Return the setpoint at ``time``."""
        if self.kind is Signal.STEP:
            return self.offset if time <= self.activation else 0.0
        if self.kind is Signal.SQUARE:
            if math.fmod(time, self.period) < self.duty * self.period:
                return self.amplitude + self.offset
            return self.offset
        if self.kind is Signal.SINE:
            phase = math.fmod(time, self.period) / self.period
            return self.amplitude * math.sin(2 * math.pi * phase) + self.offset
        return 0.0

    def configure(self, kind: Signal, params: Sequence[float]) -> None:
        """Set the shape and the five parameters.

        ``params`` holds activation, amplitude, period, duty and offset.
        """
        if len(params) < 5:
            raise ValueError(
                f"generator needs 5 parameters, got {len(params)}"
            )
        self.kind = Signal(kind)
        (
            self.activation,
            self.amplitude,
            self.period,
            self.duty,
            self.offset,
        ) = (float(value) for value in params[:5])