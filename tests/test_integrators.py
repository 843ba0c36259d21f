import math

import numpy as np

from chaoslab.core.chaos.brusselator import BrusselatorSystem, brusselator_derivative, brusselator_step
from chaoslab.core.chaos.lorenz import LorenzSystem, lorenz_step
from chaoslab.core.integrators import euler_step, rk4_step
from chaoslab.core.state import BrusselatorParameters, BrusselatorState, LorenzParameters, LorenzState


def test_euler_step_matches_hand_computation():
    state = LorenzState(1.0, 2.0, 3.0)
    params = LorenzParameters(sigma=10.0, rho=28.0, beta=8.0 / 3.0)
    h = 0.01

    new = lorenz_step(state, params, h)

    assert new.x == 1.0 + 10.0 * (2.0 - 1.0) * h
    assert new.y == 2.0 + (1.0 * (28.0 - 3.0) - 2.0) * h
    assert new.z == 3.0 + (1.0 * 2.0 - (8.0 / 3.0) * 3.0) * h


def test_euler_step_does_not_touch_input():
    state = (1.0, 1.0)
    out = euler_step(lambda s: (1.0, -1.0), state, 0.5)
    assert state == (1.0, 1.0)
    assert out == (1.5, 0.5)


def test_rk4_exponential_decay_is_fourth_order_accurate():
    h = 0.1
    value = (1.0,)
    for _ in range(10):
        value = rk4_step(lambda s: (-s[0],), value, h)
    assert math.isclose(value[0], math.exp(-1.0), rel_tol=1e-6)


def test_rk4_zero_derivative_leaves_state_unchanged():
    params = BrusselatorParameters(a=0.0, b=0.0, k1=0.0, k2=0.0, k3=0.0, k4=0.0)
    state = BrusselatorState(1.7, 0.3)
    assert brusselator_step(state, params) == state


def test_brusselator_derivative_formula():
    params = BrusselatorParameters(a=2.0, b=5.0, k1=1.0, k2=1.0, k3=1.0, k4=1.0)
    dx, dy = brusselator_derivative((1.0, 2.0), params)
    assert dx == 2.0 - 5.0 + 2.0 - 1.0
    assert dy == 5.0 - 2.0


def test_brusselator_step_never_negative():
    rng = np.random.default_rng(7)
    for _ in range(200):
        params = BrusselatorParameters(*rng.uniform(-5.0, 10.0, size=6))
        state = BrusselatorState(*rng.uniform(-3.0, 10.0, size=2))
        new = brusselator_step(state, params)
        assert new.x >= 0.0
        assert new.y >= 0.0


def test_lorenz_runs_are_deterministic():
    first = LorenzSystem(trail_length=500)
    second = LorenzSystem(trail_length=500)
    for _ in range(500):
        first.step()
        second.step()
    assert first.history.snapshot() == second.history.snapshot()


def test_brusselator_runs_are_deterministic():
    params = BrusselatorParameters(b=5.5)
    first = BrusselatorSystem(params)
    second = BrusselatorSystem(params)
    for _ in range(300):
        first.step()
        second.step()
    assert first.snapshot() == second.snapshot()


def test_lorenz_speed_scales_step():
    system = LorenzSystem(speed=2.0)
    assert system.dt == 0.02
    system.step()
    assert system.state == lorenz_step(LorenzState(1.0, 1.0, 1.0), LorenzParameters(), 0.02)


def test_parameter_change_applies_on_next_step():
    system = LorenzSystem()
    system.step()
    before = system.state
    system.params = LorenzParameters(sigma=5.0, rho=15.0, beta=1.0)
    system.step()
    assert system.state == lorenz_step(before, LorenzParameters(sigma=5.0, rho=15.0, beta=1.0), 0.01)


def test_lorenz_divergence_is_not_clamped():
    system = LorenzSystem(LorenzParameters(sigma=10.0, rho=28.0, beta=-50.0), trail_length=10)
    for _ in range(200):
        system.step()
    assert abs(system.state.z) > 1e6 or not math.isfinite(system.state.z)
