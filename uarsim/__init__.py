"""Discrete-time control loop simulator with a PID controller and an ARX plant."""

__version__ = "0.1.0"

__all__ = ["arx", "cli", "feedback", "generator", "manager", "pid"]