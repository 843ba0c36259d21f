from __future__ import annotations

import math
from dataclasses import astuple, dataclass

from chaoslab.core import constants


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")


def _require_positive_capacity(value: float) -> None:
    if not (math.isfinite(value) and value > 0):
        raise ValueError(f"carrying_capacity must be finite and > 0, got {value!r}")


def _require_count(name: str, value: int, minimum: int = 0) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ValueError(f"{name} must be an integer >= {minimum}, got {value!r}")


@dataclass(frozen=True)
class LorenzState:
    """Current point (x, y, z) of the Lorenz system."""

    x: float
    y: float
    z: float

    @classmethod
    def seed(cls) -> "LorenzState":
        return cls(*constants.LORENZ_SEED)

    def as_tuple(self) -> tuple[float, float, float]:
        return astuple(self)


@dataclass(frozen=True)
class BrusselatorState:
    """Concentrations (X, Y) of the two intermediate species."""

    x: float
    y: float

    @classmethod
    def seed(cls) -> "BrusselatorState":
        return cls(*constants.BRUSSELATOR_SEED)

    def as_tuple(self) -> tuple[float, float]:
        return astuple(self)


@dataclass(frozen=True)
class TimedState:
    """Brusselator history entry; feeds both the phase and time-series views."""

    time: float
    x: float
    y: float


@dataclass(frozen=True)
class LorenzParameters:
    sigma: float = constants.LORENZ_SIGMA
    rho: float = constants.LORENZ_RHO
    beta: float = constants.LORENZ_BETA

    def __post_init__(self) -> None:
        for name in ("sigma", "rho", "beta"):
            _require_finite(name, getattr(self, name))


@dataclass(frozen=True)
class BrusselatorParameters:
    """Reaction coefficients. A and B are the feed concentrations."""

    a: float = constants.BRUSSELATOR_A
    b: float = constants.BRUSSELATOR_B
    k1: float = constants.BRUSSELATOR_K
    k2: float = constants.BRUSSELATOR_K
    k3: float = constants.BRUSSELATOR_K
    k4: float = constants.BRUSSELATOR_K

    def __post_init__(self) -> None:
        for name in ("a", "b", "k1", "k2", "k3", "k4"):
            _require_finite(name, getattr(self, name))


@dataclass(frozen=True)
class LogisticParameters:
    growth_rate: float = constants.LOGISTIC_GROWTH_RATE
    carrying_capacity: float = constants.LOGISTIC_CAPACITY
    initial_population: float = constants.LOGISTIC_INITIAL

    def __post_init__(self) -> None:
        _require_finite("growth_rate", self.growth_rate)
        _require_finite("initial_population", self.initial_population)
        _require_positive_capacity(self.carrying_capacity)


@dataclass(frozen=True)
class BifurcationParameters:
    min_growth_rate: float = constants.BIFURCATION_MIN_RATE
    max_growth_rate: float = constants.BIFURCATION_MAX_RATE
    carrying_capacity: float = constants.BIFURCATION_CAPACITY
    initial_population: float = constants.BIFURCATION_INITIAL
    settle_periods: int = constants.BIFURCATION_SETTLE
    sample_periods: int = constants.BIFURCATION_SAMPLE
    resolution: int = constants.BIFURCATION_RESOLUTION

    def __post_init__(self) -> None:
        _require_finite("min_growth_rate", self.min_growth_rate)
        _require_finite("max_growth_rate", self.max_growth_rate)
        _require_finite("initial_population", self.initial_population)
        _require_positive_capacity(self.carrying_capacity)
        _require_count("settle_periods", self.settle_periods)
        _require_count("sample_periods", self.sample_periods)
        _require_count("resolution", self.resolution, minimum=1)


@dataclass(frozen=True)
class PopulationPoint:
    year: int
    population: float


@dataclass(frozen=True)
class BifurcationPoint:
    growth_rate: float
    population: float
