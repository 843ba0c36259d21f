from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt

from chaoslab.core.state import BifurcationPoint, LorenzState, PopulationPoint, TimedState


def _save(out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close()
    return out_path


def plot_lorenz(points: Sequence[LorenzState], out_path: Path) -> Path:
    """x-z projection of the trail, the classic butterfly view."""
    xs = [p.x for p in points]
    zs = [p.z for p in points]
    plt.figure(figsize=(6, 6))
    plt.plot(xs, zs, linewidth=0.6, color="tab:blue")
    if points:
        plt.scatter([xs[-1]], [zs[-1]], s=12, color="tab:red")
    plt.xlabel("x")
    plt.ylabel("z")
    plt.title(f"Lorenz attractor ({len(xs)} points)")
    return _save(out_path)


def plot_brusselator(history: Sequence[TimedState], out_path: Path, title: str = "Brusselator") -> Path:
    """Phase portrait next to the X/Y time series."""
    ts = [p.time for p in history]
    xs = [p.x for p in history]
    ys = [p.y for p in history]
    fig, (phase, series) = plt.subplots(1, 2, figsize=(11, 4.5))
    phase.plot(xs, ys, linewidth=0.8, color="tab:purple")
    phase.set_xlabel("X")
    phase.set_ylabel("Y")
    phase.set_title("Phase space")
    series.plot(ts, xs, label="X", color="tab:blue")
    series.plot(ts, ys, label="Y", color="tab:orange")
    series.set_xlabel("time")
    series.set_ylabel("concentration")
    series.legend()
    series.set_title("Concentrations")
    fig.suptitle(title)
    return _save(out_path)


def plot_population(series: Sequence[PopulationPoint], out_path: Path) -> Path:
    plt.figure(figsize=(8, 4.5))
    plt.plot([p.year for p in series], [p.population for p in series], marker=".", color="tab:green")
    plt.xlabel("year")
    plt.ylabel("population")
    plt.title("Logistic population growth")
    return _save(out_path)


def plot_bifurcation(points: Sequence[BifurcationPoint], out_path: Path) -> Path:
    plt.figure(figsize=(9, 5))
    plt.scatter(
        [p.growth_rate for p in points],
        [p.population for p in points],
        s=0.3,
        color="black",
    )
    plt.xlabel("growth rate")
    plt.ylabel("population")
    plt.title("Bifurcation diagram")
    return _save(out_path)
