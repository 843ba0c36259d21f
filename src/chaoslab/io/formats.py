from __future__ import annotations

import csv
import json
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from chaoslab.core import constants
from chaoslab.core.chaos.base import SimulationSnapshot
from chaoslab.core.maps.bifurcation import round_half_up
from chaoslab.core.state import BifurcationPoint, LorenzState, PopulationPoint, TimedState

LORENZ_FIELDS = ["step", "x", "y", "z"]
BRUSSELATOR_FIELDS = ["time", "x", "y"]
POPULATION_FIELDS = ["Year", "Population"]
BIFURCATION_FIELDS = ["growth_rate", "population"]


def json_safe(payload: Any) -> Any:
    """Replace NaN and infinities with None; diverged runs still export valid JSON."""
    if isinstance(payload, float):
        return payload if math.isfinite(payload) else None
    if isinstance(payload, dict):
        return {k: json_safe(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [json_safe(v) for v in payload]
    return payload


def dumps_json(payload: Any) -> str:
    return json.dumps(json_safe(payload), allow_nan=False)


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding=constants.ENCODING) as f:
        json.dump(json_safe(payload), f, indent=2, allow_nan=False)


def write_csv(path: Path, fieldnames: Sequence[str], rows: Iterable[Dict[str, Any]]) -> int:
    """Write rows with a header line; returns the number of data rows."""
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", newline="", encoding=constants.ENCODING) as f:
        writer = csv.DictWriter(f, fieldnames=list(fieldnames))
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
            count += 1
    return count


def lorenz_rows(snapshot: SimulationSnapshot[LorenzState]) -> List[Dict[str, Any]]:
    """Trail rows, numbered by the step that produced each point."""
    first = snapshot.steps - len(snapshot.history) + 1
    return [
        {"step": first + i, "x": p.x, "y": p.y, "z": p.z}
        for i, p in enumerate(snapshot.history)
    ]


def brusselator_rows(history: Sequence[TimedState]) -> List[Dict[str, Any]]:
    return [{"time": round(p.time, 6), "x": p.x, "y": p.y} for p in history]


def population_rows(series: Sequence[PopulationPoint]) -> List[Dict[str, Any]]:
    """Export rows; years after the first are shown with two decimals."""
    rows = []
    for point in series:
        value = point.population
        if point.year > 0:
            value = float(round_half_up(value, constants.POPULATION_DIGITS))
        rows.append({"Year": point.year, "Population": value})
    return rows


def bifurcation_rows(points: Sequence[BifurcationPoint]) -> List[Dict[str, Any]]:
    return [{"growth_rate": p.growth_rate, "population": p.population} for p in points]
