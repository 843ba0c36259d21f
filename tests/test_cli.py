import csv
import json
from pathlib import Path

from typer.testing import CliRunner

from chaoslab.cli.app import app
from chaoslab.utils.logging import setup_logging


def test_population_writes_csv(tmp_path):
    runner = CliRunner()
    out = Path(tmp_path) / "population.csv"
    res = runner.invoke(app, ["population", "--years", "50", "--out", str(out)])
    assert res.exit_code == 0, res.output
    assert "[run] command=population" in res.output
    assert "[done]" in res.output

    with out.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert list(rows[0].keys()) == ["Year", "Population"]
    assert len(rows) == 51
    assert float(rows[0]["Population"]) == 2.0
    for row in rows[1:]:
        value = float(row["Population"])
        assert 0.0 < value < 1000.0
        assert round(value, 2) == value


def test_population_rejects_zero_capacity():
    res = CliRunner().invoke(app, ["population", "--capacity", "0"])
    assert res.exit_code == 1
    assert "carrying_capacity" in res.output


def test_lorenz_json_summary(tmp_path):
    out = Path(tmp_path) / "trail.csv"
    res = CliRunner().invoke(app, ["lorenz", "--ticks", "300", "--trail", "100", "--out", str(out), "--json"])
    assert res.exit_code == 0, res.output

    summary = json.loads([line for line in res.output.splitlines() if line.startswith("{")][0])
    assert summary["steps"] == 300
    assert summary["trail"] == 100
    lines = out.read_text().strip().splitlines()
    assert lines[0] == "step,x,y,z"
    assert lines[1].startswith("201,")
    assert len(lines) == 101


def test_lorenz_rejects_bad_trail():
    res = CliRunner().invoke(app, ["lorenz", "--trail", "0"])
    assert res.exit_code == 1


def test_brusselator_with_plot(tmp_path):
    out = Path(tmp_path) / "bru.csv"
    png = Path(tmp_path) / "bru.png"
    res = CliRunner().invoke(
        app,
        ["brusselator", "--b", "5.5", "--ticks", "200", "--capacity", "150", "--out", str(out), "--plot", str(png)],
    )
    assert res.exit_code == 0, res.output
    assert png.exists() and png.stat().st_size > 0
    with out.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 150
    assert all(float(r["x"]) >= 0 and float(r["y"]) >= 0 for r in rows)


def test_bifurcation_command(tmp_path):
    out = Path(tmp_path) / "bif.csv"
    res = CliRunner().invoke(
        app,
        [
            "bifurcation",
            "--min", "2.8",
            "--max", "3.6",
            "--resolution", "40",
            "--settle", "200",
            "--sample", "32",
            "--out", str(out),
            "--json",
        ],
    )
    assert res.exit_code == 0, res.output
    summary = json.loads([line for line in res.output.splitlines() if line.startswith("{")][0])
    assert summary["growth_rates"] == 41
    assert summary["points"] >= 41


def test_bifurcation_rejects_zero_resolution():
    res = CliRunner().invoke(app, ["bifurcation", "--resolution", "0"])
    assert res.exit_code == 1


def test_selftest_passes():
    res = CliRunner().invoke(app, ["selftest"])
    assert res.exit_code == 0, res.output
    assert "Selftest passed." in res.output
    assert res.output.count("PASS") == 3


def test_debug_flag_accepted(tmp_path):
    res = CliRunner().invoke(app, ["--debug", "population", "--years", "3"])
    assert res.exit_code == 0, res.output
    setup_logging("WARNING")


def test_diverged_lorenz_json_is_strict(tmp_path):
    res = CliRunner().invoke(app, ["lorenz", "--beta", "-50", "--ticks", "2000", "--trail", "10", "--json"])
    assert res.exit_code == 0, res.output

    line = [line for line in res.output.splitlines() if line.startswith("{")][0]
    assert "NaN" not in line and "Infinity" not in line
    summary = json.loads(line)
    assert None in summary["state"]
