from __future__ import annotations

import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from chaoslab.core import constants
from chaoslab.core.state import (
    BifurcationParameters,
    BifurcationPoint,
    BrusselatorParameters,
    LogisticParameters,
    LorenzParameters,
    LorenzState,
    PopulationPoint,
    TimedState,
)
from chaoslab.io import formats
from chaoslab.orchestrator.pipeline import (
    run_bifurcation,
    run_brusselator,
    run_lorenz,
    run_population,
    summarize_history,
)
from chaoslab.report import plots
from chaoslab.utils.logging import get_logger

logger = get_logger(__name__)


# -------------------------
# Config structures
# -------------------------


@dataclass(frozen=True)
class LorenzJob:
    params: LorenzParameters
    ticks: int
    speed: float
    trail: int
    seed: Tuple[float, float, float]


@dataclass(frozen=True)
class BrusselatorJob:
    params: BrusselatorParameters
    ticks: int
    capacity: int


@dataclass(frozen=True)
class PopulationJob:
    params: LogisticParameters
    years: int


@dataclass(frozen=True)
class BifurcationJob:
    params: BifurcationParameters


@dataclass(frozen=True)
class OutputConfig:
    include_timestamp_utc: bool
    plots: bool


@dataclass(frozen=True)
class BatchConfig:
    lorenz: Optional[LorenzJob]
    brusselator: Optional[BrusselatorJob]
    population: Optional[PopulationJob]
    bifurcation: Optional[BifurcationJob]
    output: OutputConfig

    def jobs(self) -> List[Tuple[str, Any]]:
        named = [
            ("bifurcation", self.bifurcation),
            ("brusselator", self.brusselator),
            ("lorenz", self.lorenz),
            ("population", self.population),
        ]
        return [(kind, job) for kind, job in named if job is not None]


# -------------------------
# Config parsing/validation
# -------------------------


class ConfigError(Exception):
    """Raised when the batch config is invalid."""


SIMULATION_KEYS = ("lorenz", "brusselator", "population", "bifurcation")
TOP_LEVEL_KEYS = SIMULATION_KEYS + ("output",)


def _section(data: Dict[str, Any], key: str, allowed: Sequence[str]) -> Optional[Dict[str, Any]]:
    if key not in data:
        return None
    section = data[key]
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{key}' must be a mapping")
    unknown = sorted(set(section) - set(allowed))
    if unknown:
        raise ConfigError(f"Unknown keys in '{key}': {', '.join(unknown)}")
    return section


def _number(section: Dict[str, Any], prefix: str, key: str, default: float) -> float:
    val = section.get(key, default)
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ConfigError(f"Key '{prefix}.{key}' must be a number, got {type(val).__name__}")
    return float(val)


def _integer(section: Dict[str, Any], prefix: str, key: str, default: int) -> int:
    val = section.get(key, default)
    if isinstance(val, bool) or not isinstance(val, int):
        raise ConfigError(f"Key '{prefix}.{key}' must be an integer, got {type(val).__name__}")
    if val < 0:
        raise ConfigError(f"Key '{prefix}.{key}' must be >= 0")
    return val


def _build(prefix: str, factory, **kwargs):
    try:
        return factory(**kwargs)
    except ValueError as exc:
        raise ConfigError(f"Invalid '{prefix}' parameters: {exc}") from exc


def _parse_lorenz(section: Dict[str, Any]) -> LorenzJob:
    seed = section.get("seed", list(constants.LORENZ_SEED))
    if not isinstance(seed, (list, tuple)) or len(seed) != 3:
        raise ConfigError("Key 'lorenz.seed' must be a list of three numbers")
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in seed):
        raise ConfigError("Key 'lorenz.seed' must be a list of three numbers")
    trail = _integer(section, "lorenz", "trail", constants.LORENZ_TRAIL)
    if trail < 1:
        raise ConfigError("Key 'lorenz.trail' must be >= 1")
    params = _build(
        "lorenz",
        LorenzParameters,
        sigma=_number(section, "lorenz", "sigma", constants.LORENZ_SIGMA),
        rho=_number(section, "lorenz", "rho", constants.LORENZ_RHO),
        beta=_number(section, "lorenz", "beta", constants.LORENZ_BETA),
    )
    return LorenzJob(
        params=params,
        ticks=_integer(section, "lorenz", "ticks", constants.DEFAULT_TICKS),
        speed=_number(section, "lorenz", "speed", constants.LORENZ_SPEED),
        trail=trail,
        seed=(float(seed[0]), float(seed[1]), float(seed[2])),
    )


def _parse_brusselator(section: Dict[str, Any]) -> BrusselatorJob:
    capacity = _integer(section, "brusselator", "capacity", constants.BRUSSELATOR_CAPACITY)
    if capacity < 1:
        raise ConfigError("Key 'brusselator.capacity' must be >= 1")
    coefficients = {
        name: _number(section, "brusselator", name, default)
        for name, default in (
            ("a", constants.BRUSSELATOR_A),
            ("b", constants.BRUSSELATOR_B),
            ("k1", constants.BRUSSELATOR_K),
            ("k2", constants.BRUSSELATOR_K),
            ("k3", constants.BRUSSELATOR_K),
            ("k4", constants.BRUSSELATOR_K),
        )
    }
    return BrusselatorJob(
        params=_build("brusselator", BrusselatorParameters, **coefficients),
        ticks=_integer(section, "brusselator", "ticks", constants.DEFAULT_TICKS),
        capacity=capacity,
    )


def _parse_population(section: Dict[str, Any]) -> PopulationJob:
    params = _build(
        "population",
        LogisticParameters,
        growth_rate=_number(section, "population", "growth_rate", constants.LOGISTIC_GROWTH_RATE),
        carrying_capacity=_number(section, "population", "carrying_capacity", constants.LOGISTIC_CAPACITY),
        initial_population=_number(section, "population", "initial_population", constants.LOGISTIC_INITIAL),
    )
    return PopulationJob(params=params, years=_integer(section, "population", "years", constants.LOGISTIC_YEARS))


def _parse_bifurcation(section: Dict[str, Any]) -> BifurcationJob:
    params = _build(
        "bifurcation",
        BifurcationParameters,
        min_growth_rate=_number(section, "bifurcation", "min_growth_rate", constants.BIFURCATION_MIN_RATE),
        max_growth_rate=_number(section, "bifurcation", "max_growth_rate", constants.BIFURCATION_MAX_RATE),
        carrying_capacity=_number(section, "bifurcation", "carrying_capacity", constants.BIFURCATION_CAPACITY),
        initial_population=_number(section, "bifurcation", "initial_population", constants.BIFURCATION_INITIAL),
        settle_periods=_integer(section, "bifurcation", "settle_periods", constants.BIFURCATION_SETTLE),
        sample_periods=_integer(section, "bifurcation", "sample_periods", constants.BIFURCATION_SAMPLE),
        resolution=_integer(section, "bifurcation", "resolution", constants.BIFURCATION_RESOLUTION),
    )
    return BifurcationJob(params=params)


def parse_config(path: Path) -> BatchConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding=constants.ENCODING))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML must be a mapping.")
    unknown = sorted(set(data) - set(TOP_LEVEL_KEYS))
    if unknown:
        raise ConfigError(f"Unknown top-level keys: {', '.join(unknown)}")
    if not any(key in data for key in SIMULATION_KEYS):
        raise ConfigError(f"Config must contain at least one of: {', '.join(SIMULATION_KEYS)}")

    lorenz = _section(data, "lorenz", ("sigma", "rho", "beta", "speed", "ticks", "trail", "seed"))
    brusselator = _section(data, "brusselator", ("a", "b", "k1", "k2", "k3", "k4", "ticks", "capacity"))
    population = _section(data, "population", ("growth_rate", "carrying_capacity", "initial_population", "years"))
    bifurcation = _section(
        data,
        "bifurcation",
        (
            "min_growth_rate",
            "max_growth_rate",
            "carrying_capacity",
            "initial_population",
            "settle_periods",
            "sample_periods",
            "resolution",
        ),
    )
    output = _section(data, "output", ("include_timestamp_utc", "plots")) or {}

    return BatchConfig(
        lorenz=_parse_lorenz(lorenz) if lorenz is not None else None,
        brusselator=_parse_brusselator(brusselator) if brusselator is not None else None,
        population=_parse_population(population) if population is not None else None,
        bifurcation=_parse_bifurcation(bifurcation) if bifurcation is not None else None,
        output=OutputConfig(
            include_timestamp_utc=bool(output.get("include_timestamp_utc", True)),
            plots=bool(output.get("plots", False)),
        ),
    )


# -------------------------
# Batch internals
# -------------------------


def _measure_time(func):
    start = time.perf_counter()
    result = func()
    return result, time.perf_counter() - start


def _run_job(kind: str, job: Any) -> Dict[str, Any]:
    """Run one simulation; module level so worker processes can pickle it."""
    if kind == "lorenz":
        snapshot, elapsed = _measure_time(
            lambda: run_lorenz(job.params, job.ticks, job.speed, job.trail, LorenzState(*job.seed))
        )
        rows = formats.lorenz_rows(snapshot)
        fields = formats.LORENZ_FIELDS
        summary = {axis: summarize_history([r[axis] for r in rows]) for axis in ("x", "y", "z")}
        extra = {"ticks": job.ticks, "speed": job.speed, "trail": job.trail, "seed": list(job.seed)}
    elif kind == "brusselator":
        snapshot, elapsed = _measure_time(lambda: run_brusselator(job.params, job.ticks, job.capacity))
        rows = formats.brusselator_rows(snapshot.history)
        fields = formats.BRUSSELATOR_FIELDS
        summary = {axis: summarize_history([r[axis] for r in rows]) for axis in ("x", "y")}
        extra = {"ticks": job.ticks, "capacity": job.capacity}
    elif kind == "population":
        series, elapsed = _measure_time(lambda: run_population(job.params, job.years))
        rows = formats.population_rows(series)
        fields = formats.POPULATION_FIELDS
        summary = {"population": summarize_history([p.population for p in series])}
        extra = {"years": job.years}
    elif kind == "bifurcation":
        points, elapsed = _measure_time(lambda: run_bifurcation(job.params))
        rows = formats.bifurcation_rows(points)
        fields = formats.BIFURCATION_FIELDS
        summary = {
            "growth_rate": summarize_history([p.growth_rate for p in points]),
            "population": summarize_history([p.population for p in points]),
        }
        extra = {}
    else:
        raise ValueError(f"Unknown simulation kind '{kind}'")

    logger.info("Batch %s finished in %.3fs rows=%d", kind, elapsed, len(rows))
    return {
        "kind": kind,
        "parameters": {**asdict(job.params), **extra},
        "elapsed_s": elapsed,
        "rows": len(rows),
        "summary": summary,
        "fieldnames": list(fields),
        "data": rows,
    }


def _run_job_task(task: Tuple[str, Any]) -> Dict[str, Any]:
    return _run_job(*task)


def run_batch(config: BatchConfig, jobs: int = 1) -> List[Dict[str, Any]]:
    tasks = config.jobs()
    logger.debug("Running batch of %d simulations jobs=%d", len(tasks), jobs)
    if jobs and jobs > 1 and len(tasks) > 1:
        with ProcessPoolExecutor(max_workers=jobs) as ex:
            results = list(ex.map(_run_job_task, tasks))
    else:
        results = [_run_job_task(task) for task in tasks]

    if config.output.include_timestamp_utc:
        stamp = datetime.now(timezone.utc).isoformat()
        for rec in results:
            rec["timestamp_utc"] = stamp
    return sorted(results, key=lambda rec: rec["kind"])


# -------------------------
# Output helpers
# -------------------------


def write_outputs(out_dir: Path, results: List[Dict[str, Any]], plots: bool = False) -> Dict[str, Any]:
    """One CSV per simulation plus summary.json; returns the summary payload."""
    out_dir.mkdir(parents=True, exist_ok=True)
    entries = []
    for rec in results:
        csv_path = out_dir / f"{rec['kind']}.csv"
        formats.write_csv(csv_path, rec["fieldnames"], rec["data"])
        entry = {k: v for k, v in rec.items() if k not in ("data", "fieldnames")}
        entry["csv"] = str(csv_path)
        if plots:
            entry["plot"] = str(_plot_record(rec, out_dir / f"{rec['kind']}.png"))
        entries.append(entry)
    payload = {"runs": len(entries), "results": entries}
    formats.write_json(out_dir / "summary.json", payload)
    return payload


def _plot_record(rec: Dict[str, Any], path: Path) -> Path:
    rows = rec["data"]
    if rec["kind"] == "lorenz":
        return plots.plot_lorenz([LorenzState(r["x"], r["y"], r["z"]) for r in rows], path)
    if rec["kind"] == "brusselator":
        return plots.plot_brusselator([TimedState(r["time"], r["x"], r["y"]) for r in rows], path)
    if rec["kind"] == "population":
        return plots.plot_population([PopulationPoint(r["Year"], r["Population"]) for r in rows], path)
    return plots.plot_bifurcation([BifurcationPoint(r["growth_rate"], r["population"]) for r in rows], path)
