from __future__ import annotations

from chaoslab.core import constants
from chaoslab.core.integrators import euler_step
from chaoslab.core.state import LorenzParameters, LorenzState

from .base import ContinuousSystem


def lorenz_derivative(state: tuple[float, float, float], params: LorenzParameters) -> tuple[float, float, float]:
    x, y, z = state
    dx = params.sigma * (y - x)
    dy = x * (params.rho - z) - y
    dz = x * y - params.beta * z
    return dx, dy, dz


def lorenz_step(state: LorenzState, params: LorenzParameters, h: float) -> LorenzState:
    """One explicit Euler step. Unstable parameters are allowed to diverge."""
    new = euler_step(lambda s: lorenz_derivative(s, params), state.as_tuple(), h)
    return LorenzState(*new)


class LorenzSystem(ContinuousSystem[LorenzState]):
    """Lorenz attractor with a bounded trail of recent points."""

    def __init__(
        self,
        params: LorenzParameters | None = None,
        speed: float = constants.LORENZ_SPEED,
        trail_length: int = constants.LORENZ_TRAIL,
        seed: LorenzState | None = None,
    ):
        self.params = params or LorenzParameters()
        self.speed = float(speed)
        self.seed = seed or LorenzState.seed()
        super().__init__(trail_length)

    def initial_state(self) -> LorenzState:
        return self.seed

    @property
    def dt(self) -> float:
        return constants.LORENZ_BASE_DT * self.speed

    def advance(self, state: LorenzState, h: float) -> LorenzState:
        return lorenz_step(state, self.params, h)
