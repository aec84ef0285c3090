import csv
import json
import pathlib

import numpy as np
import pytest

from hwlab.core.timegrid import TimeGrid
from hwlab.io.config import build_curve, build_grid, load_settings
from hwlab.io.outputs import export_everything, write_vector_csv
from hwlab.io.plots import save_phi_plot, save_tree_fit_plot
from hwlab.rates.termstructure.discount_curve import DiscountCurve
from hwlab.rates.termstructure.nelson_siegel import NelsonSiegel

SAMPLE = pathlib.Path(__file__).resolve().parents[1] / "config" / "settings.yaml"


def test_sample_settings_load():
    cfg = load_settings(SAMPLE)
    assert cfg["model"]["a"] > 0 and cfg["model"]["sigma"] > 0
    assert isinstance(build_curve(cfg["curve"]), NelsonSiegel)
    grid = build_grid(cfg["grid"])
    assert isinstance(grid, TimeGrid)
    assert grid.T == pytest.approx(10.0)


def test_missing_settings_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yaml")


def test_missing_required_key(tmp_path):
    p = tmp_path / "s.yaml"
    p.write_text("model: {a: 0.1, sigma: 0.01}\ncurve: {type: flat, rate: 0.05}\n", encoding="utf-8")
    with pytest.raises(ValueError, match="grid"):
        load_settings(p)

    p.write_text("model: {a: 0.1}\ncurve: {type: flat, rate: 0.05}\ngrid: {horizon_years: 1, dt_years: 0.5}\n",
                 encoding="utf-8")
    with pytest.raises(ValueError, match="sigma"):
        load_settings(p)


def test_build_curve_variants():
    flat = build_curve({"type": "flat", "rate": 0.04})
    assert flat.inst_forward(2.0) == 0.04
    pts = build_curve({"type": "points", "points": [[1.0, 0.97], [2.0, 0.93]], "extrapolate": False})
    assert isinstance(pts, DiscountCurve) and pts.max_time == 2.0
    with pytest.raises(ValueError):
        build_curve({"type": "spline"})


def test_build_grid_with_mandatory_times():
    grid = build_grid({"mandatory_times": [1.0, 2.0], "steps": 10})
    assert grid.index_of_time(1.0) > 0
    assert grid.T == 2.0


def test_export_everything(tmp_path):
    times = np.array([0.0, 0.5, 1.0])
    results = {
        "times": times,
        "forward": np.full(3, 0.05),
        "phi": np.array([0.05, 0.050011, 0.050045]),
        "df_market": np.exp(-0.05 * times),
        "df_tree": np.exp(-0.05 * times),
        "options": [{"type": "call", "strike": 0.95, "maturity": 1.0, "bond_maturity": 2.0,
                     "analytic": 0.0033, "tree": 0.00331}],
        "meta": {"model": {"a": 0.1, "sigma": 0.01}},
    }
    export_everything(str(tmp_path), results)

    with open(tmp_path / "phi.csv", newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["t", "forward", "phi"]
    assert len(rows) == 4

    with open(tmp_path / "bond_options.csv", newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[1][0] == "call"

    assert (tmp_path / "tree_fit.csv").exists()
    assert (tmp_path / "time_grid.csv").read_text(encoding="utf-8").splitlines() == ["t", "0", "0.5", "1"]
    assert json.loads((tmp_path / "meta.json").read_text(encoding="utf-8"))["model"]["a"] == 0.1


def test_write_vector_csv(tmp_path):
    path = tmp_path / "sub" / "v.csv"
    write_vector_csv(str(path), "DF", np.array([1.0, 0.95]))
    assert path.read_text(encoding="utf-8").splitlines() == ["DF", "1", "0.95"]


def test_plots_are_written(tmp_path):
    times = np.linspace(0.0, 2.0, 9)
    save_phi_plot(times, np.full(9, 0.05), 0.05 + 1e-5 * times, str(tmp_path / "figs" / "phi.png"))
    save_tree_fit_plot(times, np.exp(-0.05 * times), np.exp(-0.05 * times), str(tmp_path / "fit.png"))
    assert (tmp_path / "figs" / "phi.png").stat().st_size > 0
    assert (tmp_path / "fit.png").stat().st_size > 0
