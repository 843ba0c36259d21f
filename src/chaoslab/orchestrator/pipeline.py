from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from chaoslab.core import constants
from chaoslab.core.chaos.base import SimulationSnapshot
from chaoslab.core.chaos.brusselator import BrusselatorSystem
from chaoslab.core.chaos.lorenz import LorenzSystem
from chaoslab.core.clock import SimulationClock
from chaoslab.core.maps.bifurcation import sample_bifurcation
from chaoslab.core.maps.logistic import simulate_population
from chaoslab.core.state import (
    BifurcationParameters,
    BifurcationPoint,
    BrusselatorParameters,
    BrusselatorState,
    LogisticParameters,
    LorenzParameters,
    LorenzState,
    PopulationPoint,
)
from chaoslab.utils.logging import get_logger

logger = get_logger(__name__)


def run_lorenz(
    params: LorenzParameters,
    ticks: int = constants.DEFAULT_TICKS,
    speed: float = constants.LORENZ_SPEED,
    trail_length: int = constants.LORENZ_TRAIL,
    seed: LorenzState | None = None,
) -> SimulationSnapshot[LorenzState]:
    logger.debug(
        "Running lorenz sigma=%s rho=%s beta=%s speed=%s ticks=%d trail=%d",
        params.sigma, params.rho, params.beta, speed, ticks, trail_length,
    )
    system = LorenzSystem(params, speed=speed, trail_length=trail_length, seed=seed)
    clock = SimulationClock(system)
    clock.run(ticks)
    snapshot = system.snapshot()
    logger.debug("Lorenz final state %s", snapshot.state)
    return snapshot


def run_brusselator(
    params: BrusselatorParameters,
    ticks: int = constants.DEFAULT_TICKS,
    capacity: int = constants.BRUSSELATOR_CAPACITY,
) -> SimulationSnapshot[BrusselatorState]:
    logger.debug("Running brusselator %s ticks=%d capacity=%d", params, ticks, capacity)
    system = BrusselatorSystem(params, capacity=capacity)
    SimulationClock(system).run(ticks)
    logger.debug("Brusselator %s", system.status())
    return system.snapshot()


def run_population(params: LogisticParameters, years: int = constants.LOGISTIC_YEARS) -> List[PopulationPoint]:
    logger.debug("Running population %s years=%d", params, years)
    return simulate_population(params, years)


def run_bifurcation(params: BifurcationParameters) -> List[BifurcationPoint]:
    return sample_bifurcation(params)


def summarize_history(values: Sequence[float]) -> Dict[str, Any]:
    """min/max/mean/final of a series; all None for an empty one."""
    if len(values) == 0:
        return {"count": 0, "min": None, "max": None, "mean": None, "final": None}
    arr = np.asarray(values, dtype=np.float64)
    return {
        "count": int(arr.size),
        "min": float(arr.min()),
        "max": float(arr.max()),
        "mean": float(arr.mean()),
        "final": float(arr[-1]),
    }


# -------------------------
# Reference scenarios
# -------------------------


def check_lorenz_scenario(ticks: int = 10000) -> Tuple[bool, str]:
    """Classic parameters stay inside the attractor envelope and never repeat a point."""
    system = LorenzSystem(LorenzParameters(), speed=1.0, trail_length=ticks)
    SimulationClock(system).run(ticks)
    pts = np.array([p.as_tuple() for p in system.history], dtype=np.float64)
    max_xy = float(np.abs(pts[:, :2]).max())
    max_z = float(np.abs(pts[:, 2]).max())
    distinct = len({tuple(row) for row in pts})
    gaps = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    ok = max_xy < 30 and max_z < 60 and distinct == len(pts) and bool((gaps > 0).all())
    return ok, f"max|x,y|={max_xy:.2f} max|z|={max_z:.2f} distinct={distinct}/{len(pts)}"


def check_population_scenario(years: int = constants.LOGISTIC_YEARS) -> Tuple[bool, str]:
    params = LogisticParameters(growth_rate=3.8, carrying_capacity=1000.0, initial_population=2.0)
    series = simulate_population(params, years)
    expected = 2.0
    ok = len(series) == years + 1
    for point in series[1:]:
        expected = max(0.0, 3.8 * expected * (1 - expected / 1000.0))
        ok = ok and 0.0 < point.population < 1000.0 and point.population == expected
    return ok, f"years={years} final={series[-1].population:.2f}"


def check_brusselator_scenario(steps: int = 1000) -> Tuple[bool, str]:
    params = BrusselatorParameters(a=2.0, b=5.5, k1=1.0, k2=1.0, k3=1.0, k4=1.0)
    system = BrusselatorSystem(params, capacity=steps)
    SimulationClock(system).run(steps)
    values = [v for p in system.history for v in (p.x, p.y)]
    ok = all(math.isfinite(v) and 0.0 <= v < 1e3 for v in values)
    stats = summarize_history(values)
    return ok, f"min={stats['min']:.3f} max={stats['max']:.3f}"


def run_scenarios() -> List[Tuple[str, bool, str]]:
    results = []
    for name, check in (
        ("lorenz", check_lorenz_scenario),
        ("population", check_population_scenario),
        ("brusselator", check_brusselator_scenario),
    ):
        ok, detail = check()
        logger.info("Scenario %s ok=%s %s", name, ok, detail)
        results.append((name, ok, detail))
    return results
