import random

import pytest

from uarsim.arx import ARXModel

ITERATIONS = 30


def _unit_step():
    return [float(i != 0) for i in range(ITERATIONS)]


def _run(model, inputs):
    return [model.simulate(u) for u in inputs]


def test_zero_input_gives_zero_output():
    model = ARXModel([-0.4], [0.6], 1, 0)
    assert _run(model, [0.0] * ITERATIONS) == pytest.approx(
        [0.0] * ITERATIONS, abs=1e-3
    )


def test_unit_step_delay_one():
    model = ARXModel([-0.4], [0.6], 1, 0)
    expected = [0, 0, 0.6, 0.84, 0.936, 0.9744,
                0.98976, 0.995904, 0.998362, 0.999345, 0.999738, 0.999895,
                0.999958, 0.999983, 0.999993, 0.999997, 0.999999, 1,
                1, 1, 1, 1, 1, 1,
                1, 1, 1, 1, 1, 1]
    assert _run(model, _unit_step()) == pytest.approx(expected, abs=1e-3)


def test_unit_step_delay_two():
    model = ARXModel([-0.4], [0.6], 2, 0)
    expected = [0, 0, 0, 0.6, 0.84, 0.936,
                0.9744, 0.98976, 0.995904, 0.998362, 0.999345, 0.999738,
                0.999895, 0.999958, 0.999983, 0.999993, 0.999997, 0.999999,
                1, 1, 1, 1, 1, 1,
                1, 1, 1, 1, 1, 1]
    assert _run(model, _unit_step()) == pytest.approx(expected, abs=1e-3)


def test_unit_step_second_order():
    model = ARXModel([-0.4, 0.2], [0.6, 0.3], 2, 0)
    expected = [0, 0, 0, 0.6, 1.14, 1.236, 1.1664, 1.11936,
                1.11446, 1.12191, 1.12587, 1.12597, 1.12521, 1.12489, 1.12491,
                1.12499, 1.12501, 1.12501, 1.125, 1.125, 1.125, 1.125, 1.125,
                1.125, 1.125, 1.125, 1.125, 1.125, 1.125, 1.125]
    assert _run(model, _unit_step()) == pytest.approx(expected, abs=1e-3)


def test_reset_restores_fresh_behaviour():
    model = ARXModel([-0.4, 0.2], [0.6, 0.3], 2, 0)
    _run(model, _unit_step())
    model.reset()
    fresh = ARXModel([-0.4, 0.2], [0.6, 0.3], 2, 0)
    assert _run(model, _unit_step()) == pytest.approx(_run(fresh, _unit_step()))


def test_configure_with_same_parameters_keeps_history():
    model = ARXModel([-0.4], [0.6], 1, 0)
    twin = ARXModel([-0.4], [0.6], 1, 0)
    inputs = _unit_step()
    _run(model, inputs[:10])
    _run(twin, inputs[:10])
    model.configure([-0.4], [0.6], 1, 0)
    assert _run(model, inputs[10:]) == pytest.approx(_run(twin, inputs[10:]))


def test_configure_changes_response():
    model = ARXModel([-0.4], [0.6], 1, 0)
    model.configure([0.0], [2.0], 1)
    outputs = _run(model, [1.0, 1.0, 1.0])
    assert outputs[0] == 0.0
    assert outputs[1] == pytest.approx(2.0)
    assert outputs[2] == pytest.approx(2.0)


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        ARXModel([-0.4], [0.6], -1)
    model = ARXModel([-0.4], [0.6], 1)
    with pytest.raises(ValueError):
        model.configure([-0.4], [0.6], -2)


def test_noise_is_reproducible_with_seeded_rng():
    first = ARXModel([-0.4], [0.6], 1, 0.5, rng=random.Random(7))
    second = ARXModel([-0.4], [0.6], 1, 0.5, rng=random.Random(7))
    assert _run(first, _unit_step()) == _run(second, _unit_step())


def test_noise_mean_is_negative_of_level():
    model = ARXModel([], [], 0, 0.5, rng=random.Random(3))
    samples = [model.simulate(0.0) for _ in range(4000)]
    mean = sum(samples) / len(samples)
    assert mean == pytest.approx(-0.5, abs=0.05)