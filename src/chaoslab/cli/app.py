from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import typer

from chaoslab.batch.runner import ConfigError, parse_config, run_batch, write_outputs
from chaoslab.cli import ui
from chaoslab.core import constants
from chaoslab.core.state import (
    BifurcationParameters,
    BrusselatorParameters,
    LogisticParameters,
    LorenzParameters,
    LorenzState,
)
from chaoslab.io import formats
from chaoslab.orchestrator.pipeline import (
    run_bifurcation,
    run_brusselator,
    run_lorenz,
    run_population,
    run_scenarios,
    summarize_history,
)
from chaoslab.report import plots
from chaoslab.utils.logging import resolve_log_level, set_command_context, setup_logging

app = typer.Typer(help="chaoslab: Lorenz, Brusselator and logistic-map simulators")


def _fail(message: str) -> None:
    ui.print_error(message)
    raise typer.Exit(code=1)


def _build(factory, **kwargs):
    try:
        return factory(**kwargs)
    except ValueError as exc:
        _fail(f"Invalid parameters: {exc}")


def _check_count(name: str, value: int, minimum: int = 0) -> None:
    if value < minimum:
        _fail(f"{name} must be >= {minimum}")


def _emit_json(payload: Dict[str, Any]) -> None:
    typer.echo(formats.dumps_json(payload))


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level"),
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level"),
):
    """Configure logging before any command runs."""
    setup_logging(resolve_log_level(verbose, debug))
    if ctx.invoked_subcommand:
        set_command_context(ctx.invoked_subcommand)


@app.command()
def lorenz(
    sigma: float = typer.Option(constants.LORENZ_SIGMA, help="Lorenz sigma"),
    rho: float = typer.Option(constants.LORENZ_RHO, help="Lorenz rho"),
    beta: float = typer.Option(constants.LORENZ_BETA, help="Lorenz beta"),
    speed: float = typer.Option(constants.LORENZ_SPEED, help="Step multiplier (step = 0.01 * speed)"),
    trail: int = typer.Option(constants.LORENZ_TRAIL, help="Number of trail points kept"),
    ticks: int = typer.Option(constants.DEFAULT_TICKS, help="Number of ticks to run"),
    x0: float = typer.Option(constants.LORENZ_SEED[0], help="Initial x"),
    y0: float = typer.Option(constants.LORENZ_SEED[1], help="Initial y"),
    z0: float = typer.Option(constants.LORENZ_SEED[2], help="Initial z"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Trail CSV output path"),
    plot: Optional[Path] = typer.Option(None, "--plot", help="PNG output path"),
    json_summary: bool = typer.Option(False, "--json", help="Print summary JSON to stdout"),
):
    """Run the Lorenz attractor (explicit Euler) and export its trail."""
    _check_count("ticks", ticks)
    _check_count("trail", trail, minimum=1)
    params = _build(LorenzParameters, sigma=sigma, rho=rho, beta=beta)
    seed = LorenzState(x0, y0, z0)
    ui.print_run_header(
        "lorenz", sigma=sigma, rho=rho, beta=beta, speed=speed, trail=trail, ticks=ticks, seed=seed.as_tuple()
    )

    snapshot = run_lorenz(params, ticks=ticks, speed=speed, trail_length=trail, seed=seed)
    state = snapshot.state
    ui.print_state("lorenz", (("x", state.x), ("y", state.y), ("z", state.z)))

    rows = formats.lorenz_rows(snapshot)
    if out:
        ui.print_io_write(out)
        formats.write_csv(out, formats.LORENZ_FIELDS, rows)
    if plot:
        ui.print_io_write(plot)
        plots.plot_lorenz(snapshot.history, plot)
    if json_summary:
        _emit_json(
            {
                "steps": snapshot.steps,
                "time": snapshot.time,
                "state": list(state.as_tuple()),
                "trail": len(rows),
                "csv": str(out) if out else None,
            }
        )
    ui.print_done(f"lorenz steps={snapshot.steps} trail={len(rows)}")


@app.command()
def brusselator(
    a: float = typer.Option(constants.BRUSSELATOR_A, "--a", help="Feed concentration A"),
    b: float = typer.Option(constants.BRUSSELATOR_B, "--b", help="Feed concentration B"),
    k1: float = typer.Option(constants.BRUSSELATOR_K, help="Rate constant k1"),
    k2: float = typer.Option(constants.BRUSSELATOR_K, help="Rate constant k2"),
    k3: float = typer.Option(constants.BRUSSELATOR_K, help="Rate constant k3"),
    k4: float = typer.Option(constants.BRUSSELATOR_K, help="Rate constant k4"),
    capacity: int = typer.Option(constants.BRUSSELATOR_CAPACITY, help="History points kept"),
    ticks: int = typer.Option(constants.DEFAULT_TICKS, help="Number of RK4 steps (h = 0.01)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="History CSV output path"),
    plot: Optional[Path] = typer.Option(None, "--plot", help="PNG output path"),
    json_summary: bool = typer.Option(False, "--json", help="Print summary JSON to stdout"),
):
    """Run the Brusselator chemical oscillator (RK4) and export its history."""
    _check_count("ticks", ticks)
    _check_count("capacity", capacity, minimum=1)
    params = _build(BrusselatorParameters, a=a, b=b, k1=k1, k2=k2, k3=k3, k4=k4)
    ui.print_run_header("brusselator", a=a, b=b, k1=k1, k2=k2, k3=k3, k4=k4, capacity=capacity, ticks=ticks)

    snapshot = run_brusselator(params, ticks=ticks, capacity=capacity)
    ui.print_state("brusselator", (("X", snapshot.state.x), ("Y", snapshot.state.y), ("t", snapshot.time)))

    rows = formats.brusselator_rows(snapshot.history)
    if out:
        ui.print_io_write(out)
        formats.write_csv(out, formats.BRUSSELATOR_FIELDS, rows)
    if plot:
        ui.print_io_write(plot)
        plots.plot_brusselator(snapshot.history, plot, title=f"Brusselator (B = {b:.1f})")
    if json_summary:
        _emit_json(
            {
                "steps": snapshot.steps,
                "time": snapshot.time,
                "state": list(snapshot.state.as_tuple()),
                "x": summarize_history([r["x"] for r in rows]),
                "y": summarize_history([r["y"] for r in rows]),
                "csv": str(out) if out else None,
            }
        )
    ui.print_done(f"brusselator steps={snapshot.steps} history={len(rows)}")


@app.command()
def population(
    growth_rate: float = typer.Option(constants.LOGISTIC_GROWTH_RATE, "--growth-rate", "-r", help="Growth rate r"),
    capacity: float = typer.Option(constants.LOGISTIC_CAPACITY, "--capacity", "-k", help="Carrying capacity K"),
    initial: float = typer.Option(constants.LOGISTIC_INITIAL, "--initial", help="Initial population P0"),
    years: int = typer.Option(constants.LOGISTIC_YEARS, "--years", "-y", help="Generations to simulate"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="CSV output path (Year,Population)"),
    plot: Optional[Path] = typer.Option(None, "--plot", help="PNG output path"),
    json_summary: bool = typer.Option(False, "--json", help="Print summary JSON to stdout"),
):
    """Simulate logistic population growth year by year."""
    _check_count("years", years)
    params = _build(
        LogisticParameters, growth_rate=growth_rate, carrying_capacity=capacity, initial_population=initial
    )
    ui.print_run_header("population", growth_rate=growth_rate, capacity=capacity, initial=initial, years=years)

    series = run_population(params, years)
    rows = formats.population_rows(series)
    if out:
        ui.print_io_write(out)
        formats.write_csv(out, formats.POPULATION_FIELDS, rows)
    if plot:
        ui.print_io_write(plot)
        plots.plot_population(series, plot)
    if json_summary:
        _emit_json(
            {
                "years": years,
                "population": summarize_history([p.population for p in series]),
                "csv": str(out) if out else None,
            }
        )
    ui.print_done(f"population years={years} final={rows[-1]['Population']}")


@app.command()
def bifurcation(
    min_rate: float = typer.Option(constants.BIFURCATION_MIN_RATE, "--min", help="Minimum growth rate"),
    max_rate: float = typer.Option(constants.BIFURCATION_MAX_RATE, "--max", help="Maximum growth rate"),
    capacity: float = typer.Option(constants.BIFURCATION_CAPACITY, "--capacity", "-k", help="Carrying capacity K"),
    initial: float = typer.Option(constants.BIFURCATION_INITIAL, "--initial", help="Initial population"),
    settle: int = typer.Option(constants.BIFURCATION_SETTLE, "--settle", help="Generations discarded per slice"),
    sample: int = typer.Option(constants.BIFURCATION_SAMPLE, "--sample", help="Generations sampled per slice"),
    resolution: int = typer.Option(constants.BIFURCATION_RESOLUTION, "--resolution", help="Growth-rate slices"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="CSV output path"),
    plot: Optional[Path] = typer.Option(None, "--plot", help="PNG output path"),
    json_summary: bool = typer.Option(False, "--json", help="Print summary JSON to stdout"),
):
    """Sweep the growth rate and collect long-run logistic values."""
    params = _build(
        BifurcationParameters,
        min_growth_rate=min_rate,
        max_growth_rate=max_rate,
        carrying_capacity=capacity,
        initial_population=initial,
        settle_periods=settle,
        sample_periods=sample,
        resolution=resolution,
    )
    ui.print_run_header(
        "bifurcation",
        min=min_rate,
        max=max_rate,
        capacity=capacity,
        initial=initial,
        settle=settle,
        sample=sample,
        resolution=resolution,
    )

    points = run_bifurcation(params)
    if out:
        ui.print_io_write(out)
        formats.write_csv(out, formats.BIFURCATION_FIELDS, formats.bifurcation_rows(points))
    if plot:
        ui.print_io_write(plot)
        plots.plot_bifurcation(points, plot)
    if json_summary:
        _emit_json(
            {
                "points": len(points),
                "growth_rates": len({p.growth_rate for p in points}),
                "csv": str(out) if out else None,
            }
        )
    ui.print_done(f"bifurcation points={len(points)}")


@app.command()
def batch(
    config: Path = typer.Option(..., "--config", "-c", exists=True, readable=True, help="YAML batch config"),
    out_dir: Path = typer.Option(..., "--out-dir", "-o", help="Directory for CSVs and summary.json"),
    jobs: int = typer.Option(1, "--jobs", "-j", help="Parallel simulations, default 1"),
    json_summary: bool = typer.Option(False, "--json", help="Print summary JSON to stdout"),
):
    """Run the simulations described in a YAML config."""
    try:
        cfg = parse_config(config)
    except ConfigError as exc:
        _fail(f"Config error: {exc}")
    ui.print_run_header("batch", config=config, jobs=jobs, simulations=len(cfg.jobs()))

    results = run_batch(cfg, jobs=jobs)
    ui.print_io_write(out_dir)
    payload = write_outputs(out_dir, results, plots=cfg.output.plots)

    if json_summary:
        _emit_json({"runs": payload["runs"], "kinds": [r["kind"] for r in payload["results"]], "out_dir": str(out_dir)})
    ui.print_done(f"batch runs={payload['runs']}")


@app.command()
def selftest():
    """Run the reference Lorenz, logistic and Brusselator scenarios."""
    ui.print_run_header("selftest")
    results = run_scenarios()
    for name, ok, detail in results:
        ui.print_scenario(name, ok, detail)
    if not all(ok for _, ok, _ in results):
        _fail("Selftest FAILED.")
    typer.secho("Selftest passed.", fg=typer.colors.GREEN)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
