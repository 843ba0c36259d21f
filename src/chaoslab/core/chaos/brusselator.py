from __future__ import annotations

from chaoslab.core import constants
from chaoslab.core.integrators import rk4_step
from chaoslab.core.state import BrusselatorParameters, BrusselatorState, TimedState

from .base import ContinuousSystem


def brusselator_derivative(state: tuple[float, float], params: BrusselatorParameters) -> tuple[float, float]:
    x, y = state
    autocatalysis = params.k3 * x * x * y
    dxdt = params.k1 * params.a - params.k2 * params.b * x + autocatalysis - params.k4 * x
    dydt = params.k2 * params.b * x - autocatalysis
    return dxdt, dydt


def brusselator_step(
    state: BrusselatorState,
    params: BrusselatorParameters,
    h: float = constants.BRUSSELATOR_DT,
) -> BrusselatorState:
    """One RK4 step; concentrations are clamped at zero afterwards."""
    x, y = rk4_step(lambda s: brusselator_derivative(s, params), state.as_tuple(), h)
    return BrusselatorState(max(0.0, x), max(0.0, y))


class BrusselatorSystem(ContinuousSystem[BrusselatorState]):
    """Brusselator oscillator; history holds (time, X, Y) entries."""

    def __init__(
        self,
        params: BrusselatorParameters | None = None,
        capacity: int = constants.BRUSSELATOR_CAPACITY,
    ):
        self.params = params or BrusselatorParameters()
        super().__init__(capacity)

    def initial_state(self) -> BrusselatorState:
        return BrusselatorState.seed()

    @property
    def dt(self) -> float:
        return constants.BRUSSELATOR_DT

    def advance(self, state: BrusselatorState, h: float) -> BrusselatorState:
        return brusselator_step(state, self.params, h)

    def record(self, state: BrusselatorState) -> TimedState:
        return TimedState(time=self.time, x=state.x, y=state.y)

    def status(self) -> str:
        return f"B = {self.params.b:.1f}, X = {self.state.x:.2f}, Y = {self.state.y:.2f}, t = {self.time:.1f}"
