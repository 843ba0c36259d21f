from __future__ import annotations

from typing import List, Tuple

import numpy as np

from chaoslab.core import constants
from chaoslab.core.state import BifurcationParameters, BifurcationPoint
from chaoslab.utils.logging import get_logger

logger = get_logger(__name__)


def round_half_up(values, digits: int):
    """Round to ``digits`` decimals with ties going up, on scalars or arrays."""
    scale = 10.0 ** digits
    return np.floor(np.asarray(values, dtype=np.float64) * scale + 0.5) / scale


def growth_rates(params: BifurcationParameters) -> np.ndarray:
    """Evenly spaced sweep values; empty when min > max."""
    if params.min_growth_rate > params.max_growth_rate:
        return np.empty(0, dtype=np.float64)
    step = (params.max_growth_rate - params.min_growth_rate) / params.resolution
    return params.min_growth_rate + np.arange(params.resolution + 1, dtype=np.float64) * step


def sample_slices(params: BifurcationParameters) -> List[Tuple[float, np.ndarray]]:
    """
    Long-run values for every growth-rate slice.

    Each slice starts from the initial population, runs ``settle_periods``
    generations that are thrown away, then keeps the distinct values (rounded
    to two decimals) seen over ``sample_periods`` more generations. All slices
    are iterated together as one array; each element follows exactly the
    scalar recurrence of ``logistic_next``.
    """
    rates = growth_rates(params)
    if rates.size == 0:
        return []

    capacity = float(params.carrying_capacity)
    population = np.full(rates.shape, float(params.initial_population))
    for _ in range(params.settle_periods):
        population = np.maximum(0.0, rates * population * (1 - population / capacity))

    samples = np.empty((params.sample_periods, rates.size), dtype=np.float64)
    for t in range(params.sample_periods):
        population = np.maximum(0.0, rates * population * (1 - population / capacity))
        samples[t] = population

    rounded = round_half_up(samples, constants.POPULATION_DIGITS)
    return [(float(rate), np.unique(rounded[:, i])) for i, rate in enumerate(rates)]


def sample_bifurcation(params: BifurcationParameters) -> List[BifurcationPoint]:
    """Scatter of (growth rate, long-run population) points for the sweep."""
    logger.debug(
        "Bifurcation sweep min=%s max=%s resolution=%d settle=%d sample=%d",
        params.min_growth_rate,
        params.max_growth_rate,
        params.resolution,
        params.settle_periods,
        params.sample_periods,
    )
    points: List[BifurcationPoint] = []
    seen = set()
    for rate, values in sample_slices(params):
        display_rate = float(round_half_up(rate, constants.GROWTH_RATE_DIGITS))
        for value in values:
            key = (display_rate, float(value))
            # slices closer than the display precision can repeat a point
            if key in seen:
                continue
            seen.add(key)
            points.append(BifurcationPoint(growth_rate=key[0], population=key[1]))
    logger.debug("Bifurcation sweep produced %d points", len(points))
    return points
