import numpy as np

from chaoslab.core.state import BifurcationParameters, BrusselatorParameters, LorenzParameters
from chaoslab.orchestrator.pipeline import run_bifurcation, run_brusselator, run_lorenz


def test_lorenz_pipeline_determinism():
    params = LorenzParameters()
    first = run_lorenz(params, ticks=2000, trail_length=2000)
    second = run_lorenz(params, ticks=2000, trail_length=2000)

    a = np.array([p.as_tuple() for p in first.history])
    b = np.array([p.as_tuple() for p in second.history])
    assert np.array_equal(a, b)


def test_brusselator_pipeline_determinism():
    params = BrusselatorParameters(b=5.5)
    assert run_brusselator(params, ticks=500) == run_brusselator(params, ticks=500)


def test_bifurcation_determinism():
    params = BifurcationParameters(resolution=50, settle_periods=200, sample_periods=50)
    assert run_bifurcation(params) == run_bifurcation(params)
