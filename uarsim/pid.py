"""Discrete PID controller."""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple


class PIDOutput(NamedTuple):
    """Components of one controller output."""

    proportional: float
    integral: float
    derivative: float
    total: float


class PIDController:
    """PID controller with the integral time either inside or before the sum."""

    def __init__(
        self,
        gain: float,
        integral_time: float = 0.0,
        derivative_time: float = 0.0,
    ) -> None:
        self.gain = float(gain)
        self.integral_time = float(integral_time)
        self.derivative_time = float(derivative_time)
        self.integral_inside = True
        self._error_sum = 0.0
        self._last_error = 0.0
        self.output = 0.0

    def step(self, error: float) -> PIDOutput:
        """Compute the control signal for one error sample."""
        proportional = self.gain * error
        integral = 0.0
        if self.integral_time != 0.0:
            if self.integral_inside:
                self._error_sum += error / self.integral_time
                integral = self._error_sum
            else:
                self._error_sum += error
                integral = self._error_sum / self.integral_time
        derivative = self.derivative_time * (error - self._last_error)
        self.output = proportional + integral + derivative
        self._last_error = error
        return PIDOutput(proportional, integral, derivative, self.output)

    def reset(self) -> None:
        """Clear the integral sum and the remembered error."""
        self._error_sum = 0.0
        self._last_error = 0.0

    def set_mode(self, integral_inside: bool) -> None:
        """Choose whether the integral time divides each sample or the sum."""
        self.integral_inside = bool(integral_inside)

    def configure(self, params: Sequence[float]) -> None:
        """Set gain, integral time and derivative time."""
        if len(params) < 3:
            raise ValueError(f"PID needs 3 parameters, got {len(params)}")
        self.gain, self.integral_time, self.derivative_time = (
            float(value) for value in params[:3]
        )