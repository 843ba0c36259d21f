from __future__ import annotations

from typing import List

from chaoslab.core import constants
from chaoslab.core.buffer import TrajectoryBuffer
from chaoslab.core.chaos.base import SimulationSnapshot
from chaoslab.core.state import LogisticParameters, PopulationPoint
from chaoslab.utils.logging import get_logger

logger = get_logger(__name__)


def logistic_next(population: float, growth_rate: float, carrying_capacity: float) -> float:
    """
    One generation of the logistic recurrence, floored at zero.

    P' = max(0, r * P * (1 - P / K))

    K is not checked here: zero raises ZeroDivisionError and a negative value
    gives meaningless populations. LogisticParameters enforces K > 0. NaN is
    passed through, matching the array sweep.
    """
    value = growth_rate * population * (1 - population / carrying_capacity)
    return 0.0 if value < 0 else value


def simulate_population(params: LogisticParameters, years: int) -> List[PopulationPoint]:
    """Year-by-year run; year 0 is the initial population."""
    if years < 0:
        raise ValueError(f"years must be >= 0, got {years!r}")
    population = float(params.initial_population)
    series = [PopulationPoint(year=0, population=population)]
    for year in range(1, years + 1):
        population = logistic_next(population, params.growth_rate, params.carrying_capacity)
        series.append(PopulationPoint(year=year, population=population))
    return series


class LogisticSystem:
    """Logistic recurrence exposed with the same step/reset/snapshot surface as the ODE systems."""

    def __init__(
        self,
        params: LogisticParameters | None = None,
        capacity: int = constants.LOGISTIC_HISTORY,
    ):
        self.params = params or LogisticParameters()
        self.history: TrajectoryBuffer[PopulationPoint] = TrajectoryBuffer(capacity)
        self.reset()

    def step(self) -> float:
        self.population = logistic_next(
            self.population, self.params.growth_rate, self.params.carrying_capacity
        )
        self.year += 1
        self.history.append(PopulationPoint(year=self.year, population=self.population))
        return self.population

    def reset(self) -> None:
        self.population = float(self.params.initial_population)
        self.year = 0
        self.history.reset()
        self.history.append(PopulationPoint(year=0, population=self.population))
        logger.debug("LogisticSystem reset to %s", self.population)

    def snapshot(self) -> SimulationSnapshot[float]:
        return SimulationSnapshot(
            steps=self.year,
            time=float(self.year),
            state=self.population,
            history=self.history.snapshot(),
        )
