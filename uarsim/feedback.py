"""Closed control loop made of a PID controller and an ARX plant."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import NamedTuple

from uarsim.arx import ARXModel
from uarsim.pid import PIDController, PIDOutput


class SimulationStep(NamedTuple):
    """Values produced by one step of the control loop."""

    setpoint: float
    error: float
    proportional: float
    integral: float
    derivative: float
    control: float
    measured: float


class ControlLoop:
    """Feedback loop: the controller drives the plant towards the setpoint."""

    def __init__(
        self,
        a: Sequence[float] = (0.0,),
        b: Sequence[float] = (0.0,),
        delay: int = 0,
        gain: float = 0.0,
        integral_time: float = 0.0,
        derivative_time: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        self.pid = PIDController(gain, integral_time, derivative_time)
        self.model = ARXModel(a, b, delay, rng=rng)
        self.measured = 0.0

    def _step(self, setpoint: float, control: PIDOutput, error: float) -> SimulationStep:
        return SimulationStep(
            setpoint,
            error,
            control.proportional,
            control.integral,
            control.derivative,
            control.total,
            self.measured,
        )

    def simulate(self, setpoint: float) -> SimulationStep:
        """Run controller and plant for one step."""
        error = setpoint - self.measured
        control = self.pid.step(error)
        self.measured = self.model.simulate(control.total)
        return self._step(setpoint, control, error)

    def controller_step(self, setpoint: float) -> SimulationStep:
        """Run only the controller, using the last known measured value."""
        error = setpoint - self.measured
        control = self.pid.step(error)
        return self._step(setpoint, control, error)

    def plant_response(self, signal: float) -> float:
        """Run only the plant for the given control signal."""
        self.measured = self.model.simulate(signal)
        return self.measured

    def set_measured(self, value: float) -> None:
        """Override the measured value, e.g. with one received from a remote plant."""
        self.measured = float(value)

    def configure_pid(self, params: Sequence[float]) -> None:
        """Set gain, integral time and derivative time."""
        self.pid.configure(params)

    def set_pid_mode(self, integral_inside: bool) -> None:
        """Choose where the integral time is applied."""
        self.pid.set_mode(integral_inside)

    def reset_pid(self) -> None:
        """Reset only the controller state."""
        self.pid.reset()

    def reset(self) -> None:
        """Reset the measured value, the controller and the plant."""
        self.measured = 0.0
        self.pid.reset()
        self.model.reset()

    def configure_arx(
        self,
        a: Sequence[float],
        b: Sequence[float],
        delay: int = 0,
        noise: float = 0.0,
    ) -> None:
        """Change the plant coefficients."""
        self.model.configure(a, b, delay, noise)