from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Tuple

import typer


def _timestamp_utc() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _abs_path(path: Path | None) -> str:
    if path is None:
        return "n/a"
    try:
        return str(path.resolve())
    except OSError:
        return str(path)


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, (tuple, list)):
        return "(" + ",".join(_format_value(v) for v in value) + ")"
    return str(value)


def print_run_header(command: str, **params: Any) -> None:
    typer.echo(f"[run] command={command} ts_utc={_timestamp_utc()}")
    if params:
        typer.echo(f"[{command}] " + " ".join(f"{k}={_format_value(v)}" for k, v in params.items()))


def print_state(label: str, values: Iterable[Tuple[str, float]]) -> None:
    typer.echo(f"[state] {label} " + " ".join(f"{k}={v:.4f}" for k, v in values))


def print_io_write(path: Path) -> None:
    typer.echo(f"[io] Writing output: {_abs_path(path)}")


def print_scenario(name: str, ok: bool, detail: str) -> None:
    status = "PASS" if ok else "FAIL"
    typer.secho(
        f"[selftest] {name}: {status} {detail}",
        fg=typer.colors.GREEN if ok else typer.colors.RED,
    )


def print_error(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)


def print_done(summary: str) -> None:
    typer.echo(f"[done] {summary}")
