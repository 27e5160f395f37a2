# uarsim

A simulator of a discrete-time feedback control loop. It is built from parts
that can be used on their own or together:

- `uarsim.generator.SetpointGenerator` produces the setpoint signal. Its
  shape is chosen with the `Signal` enumeration (`STEP`, `SQUARE`, `SINE`);
  its parameters are the activation instant, amplitude, period, duty cycle
  and a constant offset.
- `uarsim.pid.PIDController` computes the control signal from the error and
  returns a `PIDOutput` with the proportional, integral and derivative parts
  and their total. `set_mode(True)` divides each error sample by the integral
  time; `set_mode(False)` divides the accumulated sum instead.
- `uarsim.arx.ARXModel` is the controlled plant: an ARX model with
  coefficient lists `a` and `b`, an input delay and optional Gaussian noise.
- `uarsim.feedback.ControlLoop` connects a controller and a plant and returns
  a `SimulationStep` (setpoint, error, proportional, integral, derivative,
  control, measured) for every step.
- `uarsim.manager.Manager` adds the setpoint generator, settings files and a
  networked mode in which controller and plant run in separate processes
  talking over TCP.

## Installation

```
pip install .
```

The package has no dependencies outside the standard library.

## Command line

```
uarsim --signal step
```

`--signal` (`step`, `square` or `sine`) is required. The command runs the
closed loop and prints one CSV line per step to standard output, headed
`time,setpoint,error,proportional,integral,derivative,control,measured`.
Time advances by 0.01 per step.

Options:

- `--gain`, `--integral-time`, `--derivative-time` — PID parameters
  (defaults 0.5, 5.0, 0.2); `--integral-before` applies the integral time to
  the error sum rather than to each sample.
- `--activation`, `--amplitude`, `--period`, `--duty`, `--offset` —
  generator parameters (defaults 1, 1, 1, 0.5, 0).
- `-a A1 A2 A3`, `-b B1 B2 B3`, `--delay`, `--noise` — plant model
  (defaults `-0.4 0 0`, `0.6 0 0`, 1, 0).
- `--steps N` — number of steps (default 300); `--interval MS` — pause
  between steps in milliseconds.
- `--save PATH`, `--load PATH` — write or read a settings file.
- `--ranges` — print, on standard error, the axis ranges of the three charts
  (values, error, control) for the final window of samples.
- `--serve PORT` — act as the plant and wait for a remote controller;
  `--connect HOST:PORT` — act as the controller of a remote plant.

Values outside their allowed ranges are rejected.

## Library use

A plant answering a unit step:

```python
from uarsim.arx import ARXModel

plant = ARXModel([-0.4], [0.6], 1)
outputs = [plant.simulate(1.0 if k else 0.0) for k in range(6)]
# 0.0, 0.0, 0.6, 0.84, 0.936, 0.9744
```

A PID controller:

```python
from uarsim.pid import PIDController

pid = PIDController(0.5, 10.0, 0.2)
out = pid.step(1.0)      # PIDOutput(proportional, integral, derivative, total)
pid.reset()
```

A whole loop, one step at a time:

```python
from uarsim.feedback import ControlLoop

loop = ControlLoop()
loop.configure_arx([-0.4], [0.6], 1, 0.0)
loop.configure_pid([0.5, 10.0, 0.2])
step = loop.simulate(1.0)
loop.reset()
```

`uarsim.cli.run(manager, steps, time_step)` runs a `Manager` for a number of
steps and returns a `History` of the recent samples; `y_axis_range` and
`x_axis_range` compute chart ranges from it.

## Settings files

`save_settings(path, settings)` and `load_settings(path)` in
`uarsim.manager` write and read a `Settings` value as a three-line text file:
the PID parameters, then the plant model (`a|b|delay|noise`), then the
generator parameters, numbers separated by commas. `Manager.save` and
`Manager.load` do the same, with `Dane.txt` as the default path. Loading a
missing file raises `FileNotFoundError`.

## Networked mode

One `Manager` acts as the plant: `start_server(port)` listens on all
interfaces and returns the bound port (or `None` on failure). Each
`simulate(time)` then waits for a `setpoint,control` message, answers with the
plant output and returns the step. `stop_server()` stops it.

Another acts as the controller: `connect_to_server(address, port)` connects,
after which each `simulate(time)` sends the setpoint and control signal and
waits for the measured value. `start_clock()` calls `tick()` periodically,
which reports whether data arrived since the previous tick.

`add_listener(listener)` registers a callback called as
`listener(event, value)` for `"status"`, `"mode"` and `"data_received"`
events. `close()`, or leaving a `with Manager() as manager:` block, stops the
clock and closes every connection.

## What it does not do

There is no graphical window: results are printed as text, and chart ranges
are only computed, not drawn.