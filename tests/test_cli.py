import pytest

from uarsim.cli import History, main, run, x_axis_range, y_axis_range
from uarsim.feedback import ControlLoop, SimulationStep
from uarsim.generator import SetpointGenerator, Signal
from uarsim.manager import Manager, load_settings


def _step(value):
    return SimulationStep(value, value, value, value, value, value, value)


def test_y_range_empty_is_default():
    assert y_axis_range([]) == (-0.1, 0.1)


def test_y_range_small_values_is_default():
    assert y_axis_range([0.05, -0.02]) == (-0.1, 0.1)


def test_y_range_constant_values_is_default():
    assert y_axis_range([5.0, 5.0, 5.0]) == (-0.1, 0.1)


def test_y_range_symmetric():
    low, high = y_axis_range([-10.0, 10.0])
    assert low == pytest.approx(-11.0)
    assert high == pytest.approx(11.0)


def test_y_range_covers_values():
    values = [0.3, 2.0, 7.5, 1.1]
    low, high = y_axis_range(values)
    assert low < min(values)
    assert high > max(values)


def test_x_range_before_window_fills():
    assert x_axis_range(0.0) == (0.0, 3.0)
    assert x_axis_range(1.5) == (0.0, 3.0)


@pytest.mark.parametrize("t", [3.5, 10.0, 42.25])
def test_x_range_slides(t):
    low, high = x_axis_range(t)
    assert high == t
    assert high - low == pytest.approx(3.0)


def test_history_append_and_clear():
    history = History()
    history.append(0.0, _step(1.0))
    history.append(0.01, _step(2.0))
    assert len(history) == 2
    assert history.series["measured"] == [1.0, 2.0]
    history.clear()
    assert len(history) == 0
    assert history.series["setpoint"] == []


def test_history_trims_old_samples():
    history = History(limit=10, time_step=1.0)
    for t in range(20):
        history.append(float(t), _step(float(t)))
    assert history.times[-1] == 19.0
    assert history.times[0] >= 19.0 - 10
    assert all(len(v) == len(history) for v in history.series.values())
    assert len(history) <= 11


def test_history_below_limit_keeps_everything():
    history = History(limit=300)
    for t in range(50):
        history.append(t * 0.01, _step(t))
    assert len(history) == 50


def _configured_loop():
    return ControlLoop(a=[-0.4], b=[0.6], delay=1, gain=0.5, integral_time=5.0, derivative_time=0.2)


def test_run_matches_direct_loop():
    generator = SetpointGenerator(Signal.SQUARE, 0.0, 1.0, 0.1, 0.5, 0.0)
    manager = Manager(loop=_configured_loop(), generator=generator)
    history = run(manager, 20, 0.01)

    reference = _configured_loop()
    ref_gen = SetpointGenerator(Signal.SQUARE, 0.0, 1.0, 0.1, 0.5, 0.0)
    expected = []
    t = 0.0
    for _ in range(20):
        expected.append(reference.simulate(ref_gen.generate(t)).measured)
        t += 0.01
    assert len(history) == 20
    assert history.series["measured"] == pytest.approx(expected)


def test_run_zero_steps_is_empty():
    history = run(Manager(), 0, 0.01)
    assert len(history) == 0


def test_main_prints_header_and_rows(capsys):
    assert main(["--signal", "square", "--steps", "5"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "time,setpoint,error,proportional,integral,derivative,control,measured"
    assert len(lines) == 6
    assert all(len(line.split(",")) == 8 for line in lines)


def test_main_requires_signal():
    with pytest.raises(SystemExit) as info:
        main(["--steps", "1"])
    assert info.value.code == 2


def test_main_rejects_out_of_range_duty():
    with pytest.raises(SystemExit) as info:
        main(["--signal", "square", "--duty", "1.5"])
    assert info.value.code == 2


def test_main_missing_load_file(tmp_path):
    assert main(["--signal", "step", "--load", str(tmp_path / "missing.txt")]) == 1


def test_main_prints_ranges(capsys):
    assert main(["--signal", "square", "--steps", "3", "--ranges"]) == 0
    err = capsys.readouterr().err
    assert "values:" in err
    assert "control:" in err