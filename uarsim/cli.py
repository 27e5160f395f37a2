"""Command-line front end: configure the loop, run it and print the results."""

from __future__ import annotations

import argparse
import bisect
import sys
import time as _time
from collections.abc import Iterable, Iterator, Sequence

from uarsim.feedback import SimulationStep
from uarsim.generator import Signal
from uarsim.manager import Manager, Settings, load_settings, save_settings

DEFAULT_LIMIT = 300
DEFAULT_TIME_STEP = 0.01
X_WINDOW = 3.0
Y_FLOOR = 0.1
Y_MARGIN = 0.1

CHARTS: dict[str, tuple[str, ...]] = {
    "values": ("setpoint", "measured"),
    "error": ("error",),
    "control": ("control", "proportional", "integral", "derivative"),
}


class History:
    """Recent simulation results, trimmed to roughly ``limit`` samples."""

    def __init__(self, limit: int = DEFAULT_LIMIT, time_step: float = DEFAULT_TIME_STEP) -> None:
        self.limit = int(limit)
        self.time_step = float(time_step)
        self.times: list[float] = []
        self.series: dict[str, list[float]] = {name: [] for name in SimulationStep._fields}

    def __len__(self) -> int:
        return len(self.times)

    def append(self, time: float, step: SimulationStep) -> None:
        """Record one step; drop samples older than the window once over the limit."""
        self.times.append(float(time))
        for name, value in zip(SimulationStep._fields, step):
            self.series[name].append(float(value))
        if len(self.times) > self.limit:
            cut = bisect.bisect_left(self.times, time - self.limit * self.time_step)
            if cut:
                del self.times[:cut]
                for values in self.series.values():
                    del values[:cut]

    def clear(self) -> None:
        """Forget every recorded sample."""
        self.times.clear()
        for values in self.series.values():
            values.clear()


def y_axis_range(values: Iterable[float]) -> tuple[float, float]:
    """Value-axis range covering ``values`` with a 10% margin."""
    data = list(values)
    if not data:
        return (-Y_FLOOR, Y_FLOOR)
    low, high = min(data), max(data)
    if low >= high or (abs(low) < Y_FLOOR and abs(high) < Y_FLOOR):
        return (-Y_FLOOR, Y_FLOOR)
    return (low - Y_MARGIN * abs(low), high + Y_MARGIN * abs(high))


def x_axis_range(time: float) -> tuple[float, float]:
    """Time-axis range: a sliding window ending at ``time``."""
    low = time - X_WINDOW if time > X_WINDOW else 0.0
    high = X_WINDOW if time < X_WINDOW else time
    return (low, high)


def _steps(
    manager: Manager, steps: int, time_step: float, interval: float | None = None
) -> Iterator[tuple[float, SimulationStep]]:
    current = 0.0
    for _ in range(steps):
        yield current, manager.simulate(current)
        current += time_step
        if interval:
            _time.sleep(interval)


def run(manager: Manager, steps: int, time_step: float = DEFAULT_TIME_STEP) -> History:
    """Simulate ``steps`` steps and return the recorded history."""
    history = History(time_step=time_step)
    for current, step in _steps(manager, steps, time_step):
        history.append(current, step)
    return history


def _bounded(low: float, high: float, kind: type = float):
    def convert(text: str):
        try:
            value = kind(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
        if not low <= value <= high:
            raise argparse.ArgumentTypeError(f"{value} is outside [{low}, {high}]")
        return value

    return convert


def _address(text: str) -> tuple[str, int]:
    host, sep, port = text.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got {text!r}")
    return host, int(port)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uarsim", description="Simulate a PID controller driving an ARX plant."
    )
    parser.add_argument("--signal", required=True, choices=[s.value for s in Signal if s is not Signal.UNSET])
    parser.add_argument("--gain", type=_bounded(0.01, 9999.0), default=0.5)
    parser.add_argument("--integral-time", type=_bounded(0.0, 9999.0), default=5.0)
    parser.add_argument("--derivative-time", type=_bounded(0.0, 9999.0), default=0.2)
    parser.add_argument("--integral-before", action="store_true",
                        help="divide the error sum by the integral time instead of each sample")
    parser.add_argument("--activation", type=_bounded(0.0, 9999.0), default=1.0)
    parser.add_argument("--amplitude", type=_bounded(0.0, 9999.0), default=1.0)
    parser.add_argument("--period", type=_bounded(0.5, 9999.0), default=1.0)
    parser.add_argument("--duty", type=_bounded(0.01, 0.99), default=0.5)
    parser.add_argument("--offset", type=_bounded(-9999.9, 9999.9), default=0.0)
    coefficient = _bounded(-9999.0, 9999.0)
    parser.add_argument("-a", nargs=3, type=coefficient, default=[-0.4, 0.0, 0.0], metavar="A")
    parser.add_argument("-b", nargs=3, type=coefficient, default=[0.6, 0.0, 0.0], metavar="B")
    parser.add_argument("--delay", type=_bounded(1, 9999, int), default=1)
    parser.add_argument("--noise", type=_bounded(0.0, 9999.0), default=0.0)
    parser.add_argument("--steps", type=_bounded(0, 10**9, int), default=DEFAULT_LIMIT)
    parser.add_argument("--interval", type=_bounded(1, 9999, int), default=None,
                        help="milliseconds to wait between steps")
    parser.add_argument("--save", metavar="PATH")
    parser.add_argument("--load", metavar="PATH")
    parser.add_argument("--ranges", action="store_true", help="print final axis ranges")
    network = parser.add_mutually_exclusive_group()
    network.add_argument("--serve", type=_bounded(0, 65535, int), metavar="PORT",
                         help="act as the plant and wait for a remote controller")
    network.add_argument("--connect", type=_address, metavar="HOST:PORT",
                         help="act as the controller of a remote plant")
    return parser


def _settings_from(args: argparse.Namespace) -> Settings:
    return Settings(
        pid=[args.gain, args.integral_time, args.derivative_time],
        a=list(args.a),
        b=list(args.b),
        delay=args.delay,
        noise=args.noise,
        generator=[args.activation, args.amplitude, args.period, args.duty, args.offset],
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulator from the command line."""
    args = _parser().parse_args(argv)

    if args.load:
        try:
            settings = load_settings(args.load)
        except (OSError, ValueError) as exc:
            print(f"uarsim: {exc}", file=sys.stderr)
            return 1
        if (len(settings.pid), len(settings.a), len(settings.b), len(settings.generator)) != (3, 3, 3, 5):
            print(f"uarsim: {args.load}: unexpected number of values", file=sys.stderr)
            return 1
    else:
        settings = _settings_from(args)

    if args.save:
        save_settings(args.save, settings)

    with Manager() as manager:
        manager.set_pid(settings.pid)
        manager.set_pid_mode(not args.integral_before)
        manager.set_arx(settings.a, settings.b, settings.delay, settings.noise)
        manager.set_generator(Signal(args.signal), settings.generator)

        if args.serve is not None:
            if manager.start_server(args.serve) is None:
                print("uarsim: could not start the server", file=sys.stderr)
                return 1
        elif args.connect is not None:
            manager.connect_to_server(*args.connect)
            manager.start_clock()

        interval = args.interval / 1000.0 if args.interval else None
        history = History(time_step=DEFAULT_TIME_STEP)
        print("time," + ",".join(SimulationStep._fields))
        last = 0.0
        for current, step in _steps(manager, args.steps, DEFAULT_TIME_STEP, interval):
            history.append(current, step)
            last = current
            print(",".join(f"{value:.6g}" for value in (current, *step)))

    if args.ranges:
        x_low, x_high = x_axis_range(last)
        for chart, names in CHARTS.items():
            y_low, y_high = y_axis_range(v for name in names for v in history.series[name])
            print(
                f"{chart}: x=[{x_low:.6g}, {x_high:.6g}] y=[{y_low:.6g}, {y_high:.6g}]",
                file=sys.stderr,
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())