import csv
import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from chaoslab.batch.runner import ConfigError, parse_config, run_batch, write_outputs
from chaoslab.cli.app import app


def _write(tmp_path, cfg) -> Path:
    path = Path(tmp_path) / "batch.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


def _small_config():
    return {
        "lorenz": {"ticks": 200, "trail": 50, "seed": [1, 1, 1]},
        "brusselator": {"b": 5.5, "ticks": 100, "capacity": 80},
        "population": {"growth_rate": 3.8, "carrying_capacity": 1000, "initial_population": 2, "years": 20},
        "bifurcation": {
            "min_growth_rate": 2.5,
            "max_growth_rate": 3.5,
            "resolution": 20,
            "settle_periods": 100,
            "sample_periods": 16,
        },
        "output": {"include_timestamp_utc": False},
    }


def test_parse_config_defaults(tmp_path):
    cfg = parse_config(_write(tmp_path, {"population": None}))
    assert cfg.population is not None
    assert cfg.population.years == 50
    assert cfg.population.params.carrying_capacity == 1000.0
    assert cfg.lorenz is None
    assert [kind for kind, _ in cfg.jobs()] == ["population"]


@pytest.mark.parametrize(
    "cfg, message",
    [
        ({}, "at least one"),
        ({"pendulum": {}}, "Unknown top-level"),
        ({"lorenz": {"sigma": "ten"}}, "lorenz.sigma"),
        ({"lorenz": {"seed": [1, 2]}}, "lorenz.seed"),
        ({"population": {"carrying_capacity": 0}}, "population"),
        ({"bifurcation": {"resolution": 0}}, "bifurcation"),
        ({"brusselator": {"capacity": 0}}, "brusselator.capacity"),
        ({"brusselator": {"kappa": 1.0}}, "kappa"),
        ({"population": {"years": -3}}, "population.years"),
    ],
)
def test_parse_config_rejects(tmp_path, cfg, message):
    with pytest.raises(ConfigError, match=message):
        parse_config(_write(tmp_path, cfg))


def test_parse_config_rejects_non_mapping(tmp_path):
    path = Path(tmp_path) / "bad.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        parse_config(path)


def test_run_batch_and_write_outputs(tmp_path):
    cfg = parse_config(_write(tmp_path, _small_config()))
    results = run_batch(cfg)
    assert [r["kind"] for r in results] == ["bifurcation", "brusselator", "lorenz", "population"]
    assert all("timestamp_utc" not in r for r in results)

    out_dir = Path(tmp_path) / "out"
    payload = write_outputs(out_dir, results)
    assert payload["runs"] == 4

    summary = json.loads((out_dir / "summary.json").read_text())
    by_kind = {r["kind"]: r for r in summary["results"]}
    assert by_kind["lorenz"]["rows"] == 50
    assert by_kind["brusselator"]["rows"] == 80
    assert by_kind["population"]["rows"] == 21
    assert by_kind["brusselator"]["summary"]["x"]["min"] >= 0.0
    assert "data" not in by_kind["lorenz"]

    with (out_dir / "population.csv").open(newline="", encoding="utf-8") as f:
        assert len(list(csv.DictReader(f))) == 21


def test_batch_command_parallel(tmp_path):
    cfg = _small_config()
    cfg["output"]["plots"] = True
    cfg_path = _write(tmp_path, cfg)
    out_dir = Path(tmp_path) / "runs"

    res = CliRunner().invoke(
        app, ["batch", "--config", str(cfg_path), "--out-dir", str(out_dir), "--jobs", "2", "--json"]
    )
    assert res.exit_code == 0, res.output
    summary = json.loads([line for line in res.output.splitlines() if line.startswith("{")][0])
    assert summary["runs"] == 4
    for kind in ("lorenz", "brusselator", "population", "bifurcation"):
        assert (out_dir / f"{kind}.csv").exists()
        assert (out_dir / f"{kind}.png").exists()


def test_batch_command_config_error(tmp_path):
    cfg_path = _write(tmp_path, {"lorenz": {"trail": 0}})
    res = CliRunner().invoke(app, ["batch", "--config", str(cfg_path), "--out-dir", str(tmp_path)])
    assert res.exit_code == 1
    assert "Config error" in res.output
