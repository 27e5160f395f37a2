import math

import pytest

from uarsim.generator import SetpointGenerator, Signal


def test_step_returns_offset_until_activation():
    gen = SetpointGenerator(Signal.STEP, activation=2.0, offset=3.5)
    assert gen.generate(1.0) == 3.5
    assert gen.generate(2.0) == 3.5
    assert gen.generate(2.5) == 0.0


def test_square_wave_levels():
    gen = SetpointGenerator(
        Signal.SQUARE, amplitude=2.0, period=4.0, duty=0.25, offset=1.0
    )
    assert gen.generate(0.5) == 3.0
    assert gen.generate(2.0) == 1.0
    # periodic
    assert gen.generate(4.5) == gen.generate(0.5)
    assert gen.generate(6.0) == gen.generate(2.0)


def test_sine_wave_shape():
    gen = SetpointGenerator(Signal.SINE, amplitude=2.0, period=4.0, offset=1.0)
    assert gen.generate(0.0) == pytest.approx(1.0)
    assert gen.generate(1.0) == pytest.approx(3.0)
    assert gen.generate(3.0) == pytest.approx(-1.0)
    assert gen.generate(5.0) == pytest.approx(gen.generate(1.0))


def test_unset_signal_is_zero():
    gen = SetpointGenerator(Signal.UNSET, amplitude=5.0, offset=2.0)
    assert gen.generate(0.3) == 0.0
    assert gen.generate(10.0) == 0.0


def test_configure_sets_all_parameters():
    gen = SetpointGenerator()
    gen.configure(Signal.SQUARE, [1.0, 2.0, 3.0, 0.4, 0.5])
    assert gen.kind is Signal.SQUARE
    assert (gen.activation, gen.amplitude, gen.period, gen.duty, gen.offset) == (
        1.0,
        2.0,
        3.0,
        0.4,
        0.5,
    )


def test_configure_changes_output():
    gen = SetpointGenerator()
    gen.configure(Signal.SINE, (0.0, 1.0, 2.0, 0.5, 0.0))
    assert gen.generate(0.5) == pytest.approx(math.sin(math.pi / 2))


def test_configure_rejects_short_parameters():
    gen = SetpointGenerator()
    with pytest.raises(ValueError):
        gen.configure(Signal.STEP, [1.0, 2.0])