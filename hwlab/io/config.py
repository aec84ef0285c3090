# hwlab/io/config.py
from __future__ import annotations
import pathlib
from typing import Any, Dict

import yaml

from ..core.timegrid import TimeGrid
from ..rates.termstructure.base_curve import TermStructure
from ..rates.termstructure.discount_curve import DiscountCurve
from ..rates.termstructure.nelson_siegel import NelsonSiegel


def load_settings(path: str | pathlib.Path) -> dict:
    """
    Load the YAML settings file and return a dict.
    Uses yaml.safe_load. Raises FileNotFoundError if absent.
    """
    p = pathlib.Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"Settings file {p} must contain a mapping")
    required = ["model", "curve", "grid"]
    for k in required:
        if k not in cfg:
            raise ValueError(f"Missing required key in settings: '{k}'")
    for k in ("a", "sigma"):
        if k not in cfg["model"]:
            raise ValueError(f"Missing required key in settings: 'model.{k}'")
    return cfg


def build_curve(curve_cfg: Dict[str, Any]) -> TermStructure:
    """
    curve:
      type: flat | points | nelson_siegel
      rate: 0.05                              # flat
      points: [[0.5, 0.975], [1.0, 0.951]]    # points (t, DF)
      extrapolate: true                       # points
      beta0/beta1/beta2/tau                   # nelson_siegel
    """
    kind = curve_cfg.get("type")
    if kind == "flat":
        return DiscountCurve("flat", flat_zero_rate=float(curve_cfg["rate"]))
    if kind == "points":
        pts = [(float(t), float(df)) for t, df in curve_cfg["points"]]
        return DiscountCurve("points", points=pts, extrapolate=bool(curve_cfg.get("extrapolate", True)))
    if kind == "nelson_siegel":
        return NelsonSiegel(
            beta0=float(curve_cfg["beta0"]),
            beta1=float(curve_cfg["beta1"]),
            beta2=float(curve_cfg["beta2"]),
            tau=float(curve_cfg["tau"]),
        )
    raise ValueError(f"curve.type must be 'flat', 'points' or 'nelson_siegel', got {kind!r}")


def build_grid(grid_cfg: Dict[str, Any]) -> TimeGrid:
    """
    grid:
      horizon_years: 5.0
      dt_years: 0.0833333333333
    or
      mandatory_times: [1.0, 2.0]
      steps: 200
    """
    if "mandatory_times" in grid_cfg:
        return TimeGrid.from_mandatory_times(grid_cfg["mandatory_times"], int(grid_cfg["steps"]))
    return TimeGrid.uniform(float(grid_cfg["horizon_years"]), float(grid_cfg["dt_years"]))
