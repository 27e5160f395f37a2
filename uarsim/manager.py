"""Simulation manager: local loop, networked controller/plant split, settings files."""

from __future__ import annotations

import logging
import re
import select
import socket
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from uarsim.feedback import ControlLoop, SimulationStep
from uarsim.generator import SetpointGenerator, Signal

log = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "Dane.txt"

EVENT_STATUS = "status"
EVENT_MODE = "mode"
EVENT_DATA_RECEIVED = "data_received"

STATUS_CLOCK_STARTED = "One-sided clocking started."
STATUS_CLOCK_STOPPED = "One-sided clocking stopped."
STATUS_SERVER_STOPPED = "Server stopped."
STATUS_SERVER_FAILED = "Could not start the server!"
STATUS_PEER_CONNECTED = "Connected to the controller (client)!"
STATUS_CONNECTED = "Connected to the plant (server)!"
STATUS_CONNECT_FAILED = "Could not connect to the server!"
STATUS_DISCONNECTED = "Disconnected from server."

DEFAULT_PARAMETERS_MESSAGE = "PID=1.0,0.1,0.01;ARX=1.0,0.5,0.1"

Listener = Callable[[str, Any], None]

_INT_PATTERN = re.compile(r"\s*[+-]?\d+\s*")


def _to_double(text: str) -> float:
    """Parse a number, giving 0.0 for anything that is not one."""
    if "_" in text:
        return 0.0
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


def _to_int(text: str) -> int:
    """Parse a base-10 integer, giving 0 for anything that is not one."""
    if _INT_PATTERN.fullmatch(text) is None:
        return 0
    return int(text)


def _number(value: float) -> str:
    return format(value, "g")


def _format_row(values: Sequence[float]) -> str:
    return ",".join(_number(float(v)) for v in values)


def _parse_row(line: str) -> list[float]:
    return [_to_double(part) for part in line.split(",")]


@dataclass
class Settings:
    """Everything stored in a settings file."""

    pid: list[float] = field(default_factory=lambda: [0.5, 5.0, 0.2])
    a: list[float] = field(default_factory=lambda: [-0.4, 0.0, 0.0])
    b: list[float] = field(default_factory=lambda: [0.6, 0.0, 0.0])
    delay: int = 1
    noise: float = 0.0
    generator: list[float] = field(
        default_factory=lambda: [1.0, 1.0, 1.0, 0.5, 0.0]
    )


def save_settings(path: str | Path, settings: Settings) -> None:
    """Write settings as three lines: PID, ARX (A|B|delay|noise), generator."""
    arx = "|".join(
        [
            _format_row(settings.a),
            _format_row(settings.b),
            str(int(settings.delay)),
            _number(float(settings.noise)),
        ]
    )
    text = "\n".join([_format_row(settings.pid), arx, _format_row(settings.generator)])
    Path(path).write_text(text, encoding="utf-8")


def load_settings(path: str | Path) -> Settings:
    """Read settings written by :func:`save_settings`."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"settings file does not exist: {path}")
    lines = path.read_text(encoding="utf-8").splitlines()
    lines.extend([""] * (3 - len(lines)))
    parts = lines[1].split("|")
    if len(parts) < 4:
        raise ValueError(f"malformed ARX line: {lines[1]!r}")
    return Settings(
        pid=_parse_row(lines[0]),
        a=_parse_row(parts[0]),
        b=_parse_row(parts[1]),
        delay=_to_int(parts[2]),
        noise=_to_double(parts[3]),
        generator=_parse_row(lines[2]),
    )


class Manager:
    """Runs the control loop locally, as a networked controller or as a networked plant.

    Listeners are called as ``listener(event, value)`` where ``event`` is one of
    ``EVENT_STATUS``, ``EVENT_MODE`` or ``EVENT_DATA_RECEIVED``.
    """

    def __init__(
        self,
        loop: ControlLoop | None = None,
        generator: SetpointGenerator | None = None,
        *,
        clock_interval: float = 1.0,
        wait_timeout: float = 1.0,
        connect_timeout: float = 3.0,
    ) -> None:
        self.loop = loop if loop is not None else ControlLoop()
        self.generator = generator if generator is not None else SetpointGenerator()
        self.clock_interval = clock_interval
        self.wait_timeout = wait_timeout
        self.connect_timeout = connect_timeout
        self.data_received = False
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()
        self._server: socket.socket | None = None
        self._server_conn: socket.socket | None = None
        self._server_stop: threading.Event | None = None
        self._server_thread: threading.Thread | None = None
        self._client: socket.socket | None = None
        self._clock_stop: threading.Event | None = None
        self._clock_thread: threading.Thread | None = None

    def __enter__(self) -> Manager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add_listener(self, listener: Listener) -> None:
        """Register a callback for status, mode and data-received events."""
        self._listeners.append(listener)

    def _emit(self, event: str, value: Any) -> None:
        for listener in list(self._listeners):
            listener(event, value)

    # Clocking

    def start_clock(self) -> None:
        """Start calling :meth:`tick` every ``clock_interval`` seconds."""
        self._halt_clock()
        stop = threading.Event()
        thread = threading.Thread(target=self._clock_loop, args=(stop,), daemon=True)
        self._clock_stop, self._clock_thread = stop, thread
        thread.start()
        self._emit(EVENT_STATUS, STATUS_CLOCK_STARTED)

    def stop_clock(self) -> None:
        """Stop the periodic ticking."""
        self._halt_clock()
        self._emit(EVENT_STATUS, STATUS_CLOCK_STOPPED)

    def _halt_clock(self) -> None:
        if self._clock_stop is not None:
            self._clock_stop.set()
        thread = self._clock_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._clock_stop = self._clock_thread = None

    def _clock_loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.clock_interval):
            self.tick()

    def tick(self) -> bool:
        """Report whether data arrived since the last tick, then clear the flag."""
        received = self.data_received
        if received:
            log.info("Processing received data")
        else:
            log.info("No data - keeping the previous value")
        self._emit(EVENT_DATA_RECEIVED, received)
        self.data_received = False
        return received

    # Server side (plant)

    def start_server(self, port: int) -> int | None:
        """Listen on ``port`` on all interfaces; return the bound port or None."""
        if self._server is not None:
            return self._server.getsockname()[1]
        try:
            server = socket.create_server(("", int(port)))
        except OSError:
            self._emit(EVENT_STATUS, STATUS_SERVER_FAILED)
            return None
        server.settimeout(0.1)
        stop = threading.Event()
        thread = threading.Thread(
            target=self._accept_loop, args=(server, stop), daemon=True
        )
        self._server, self._server_stop, self._server_thread = server, stop, thread
        thread.start()
        bound = server.getsockname()[1]
        self._emit(EVENT_STATUS, f"Server listening on port {bound}")
        return bound

    def _accept_loop(self, server: socket.socket, stop: threading.Event) -> None:
        while not stop.is_set():
            try:
                conn, _ = server.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            conn.settimeout(None)
            with self._lock:
                previous, self._server_conn = self._server_conn, conn
            if previous is not None:
                previous.close()
            self._emit(EVENT_STATUS, STATUS_PEER_CONNECTED)

    def stop_server(self) -> None:
        """Stop listening and drop the connected controller."""
        if self._server is None:
            return
        if self._server_stop is not None:
            self._server_stop.set()
        if self._server_thread is not None:
            self._server_thread.join()
        self._server.close()
        with self._lock:
            conn, self._server_conn = self._server_conn, None
        if conn is not None:
            conn.close()
        self._server = self._server_stop = self._server_thread = None
        self._emit(EVENT_STATUS, STATUS_SERVER_STOPPED)

    # Client side (controller)

    def connect_to_server(self, address: str, port: int) -> None:
        """Connect to a remote plant."""
        if self._client is not None:
            return
        try:
            client = socket.create_connection(
                (address, int(port)), timeout=self.connect_timeout
            )
        except OSError:
            self._emit(EVENT_STATUS, STATUS_CONNECT_FAILED)
            return
        client.settimeout(None)
        self._client = client
        self._emit(EVENT_STATUS, STATUS_CONNECTED)

    def disconnect_client(self) -> None:
        """Close the connection to the remote plant."""
        if self._client is None:
            return
        try:
            self._client.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._client.close()
        self._client = None
        self._emit(EVENT_STATUS, STATUS_DISCONNECTED)

    # Messages

    def send_message(self, message: str) -> None:
        """Send text to the connected peer, if any."""
        with self._lock:
            conn = self._server_conn
        target = conn if conn is not None else self._client
        if target is not None:
            target.sendall(message.encode("utf-8"))

    def send_parameters(self) -> None:
        """Send the fixed parameter message to the remote plant."""
        if self._client is not None:
            self._client.sendall(DEFAULT_PARAMETERS_MESSAGE.encode("utf-8"))
            log.debug("Sent parameters: %s", DEFAULT_PARAMETERS_MESSAGE)

    def receive_parameters(self, text: str) -> None:
        """Apply ``"kp,ti,td;a,b,delay"`` to the controller and the plant."""
        parts = text.split(";")
        if len(parts) < 2:
            raise ValueError(f"expected PID and ARX sections: {text!r}")
        pid = parts[0].split(",")
        arx = parts[1].split(",")
        if len(pid) < 3 or len(arx) < 3:
            raise ValueError(f"too few parameters: {text!r}")
        self.loop.configure_pid([_to_double(value) for value in pid[:3]])
        self.loop.configure_arx(
            [_to_double(arx[0])], [_to_double(arx[1])], _to_int(arx[2])
        )
        log.debug("Received and applied parameters: %s", text)

    def switch_mode(self, network_mode: bool) -> None:
        """Announce a switch between network and local mode."""
        self._emit(EVENT_MODE, bool(network_mode))
        log.debug("Mode: %s", "online" if network_mode else "offline")

    # Configuration

    def set_generator(self, kind: Signal, params: Sequence[float]) -> None:
        """Configure the setpoint generator."""
        self.generator.configure(kind, params)

    def set_pid(self, params: Sequence[float]) -> None:
        """Set gain, integral time and derivative time."""
        self.loop.configure_pid(params)

    def set_pid_mode(self, integral_inside: bool) -> None:
        """Choose where the integral time is applied."""
        self.loop.set_pid_mode(integral_inside)

    def set_arx(
        self,
        a: Sequence[float],
        b: Sequence[float],
        delay: int,
        noise: float = 0.0,
    ) -> None:
        """Change the plant coefficients."""
        self.loop.configure_arx(a, b, delay, noise)

    def reset_simulation(self) -> None:
        """Reset the whole control loop."""
        self.loop.reset()

    def reset_pid(self) -> None:
        """Reset only the controller."""
        self.loop.reset_pid()

    # Simulation

    def _wait_for_data(self, conn: socket.socket) -> bytes | None:
        try:
            ready, _, _ = select.select([conn], [], [], self.wait_timeout)
            if not ready:
                return None
            data = conn.recv(65536)
        except (OSError, ValueError):
            return None
        return data or None

    def simulate(self, time: float) -> SimulationStep:
        """Run one step at ``time`` in whichever mode is active."""
        setpoint = self.generator.generate(time)

        client = self._client
        if client is not None:
            step = self.loop.controller_step(setpoint)
            payload = f"{_number(setpoint)},{_number(step.control)}"
            try:
                client.sendall(payload.encode("utf-8"))
            except OSError:
                return step
            log.debug("Sent setpoint and control: %s", payload)
            data = self._wait_for_data(client)
            if data is None:
                log.debug("No response from the server")
                return step
            measured = _to_double(data.decode("utf-8", "replace"))
            self.loop.set_measured(measured)
            self.data_received = True
            return step._replace(measured=measured)

        with self._lock:
            conn = self._server_conn
        if conn is not None:
            data = self._wait_for_data(conn)
            if data is None:
                log.debug("No data from the client")
                return SimulationStep(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
            fields = data.decode("utf-8", "replace").split(",")
            if len(fields) < 2:
                raise ValueError(f"expected 'setpoint,control', got {fields!r}")
            received_setpoint = _to_double(fields[0])
            control = _to_double(fields[1])
            measured = self.loop.plant_response(control)
            conn.sendall(_number(measured).encode("utf-8"))
            self.data_received = True
            return SimulationStep(
                received_setpoint, 0.0, 0.0, 0.0, 0.0, control, measured
            )

        return self.loop.simulate(setpoint)

    # Files

    def save(self, settings: Settings, path: str | Path = DEFAULT_SETTINGS_FILE) -> None:
        """Write settings to ``path``."""
        save_settings(path, settings)

    def load(self, path: str | Path = DEFAULT_SETTINGS_FILE) -> Settings:
        """Read settings from ``path``."""
        return load_settings(path)

    def close(self) -> None:
        """Stop the clock and close every connection."""
        self._halt_clock()
        self.disconnect_client()
        self.stop_server()