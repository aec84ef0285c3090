"""
CSV/JSON exports for a Hull–White run.

We keep it dependency-free (no pandas). All arrays are written as simple CSVs.
Directory is created if missing.
"""

from __future__ import annotations
import os, csv, json
from typing import Any, Dict, List
import numpy as np


def _ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def write_vector_csv(filepath: str, header: str, vec: np.ndarray) -> None:
    _ensure_dir(os.path.dirname(filepath))
    vec = np.asarray(vec, dtype=float).ravel()
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow([header])
        for v in vec:
            w.writerow([f"{v:.12g}"])


def write_matrix_csv(filepath: str, headers: List[str], rows: List[List[Any]]) -> None:
    _ensure_dir(os.path.dirname(filepath))
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(headers)
        for row in rows:
            w.writerow(row)


def write_meta_json(filepath: str, meta: Dict[str, Any]) -> None:
    _ensure_dir(os.path.dirname(filepath))
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2, ensure_ascii=False)


# ---------- High-level exports -----------------------------------------------

def export_phi_table(outdir: str, times: np.ndarray, forward: np.ndarray, phi: np.ndarray) -> None:
    """phi.csv: t, f(0,t), phi(t)"""
    rows = [[f"{t:.12g}", f"{f:.12g}", f"{p:.12g}"] for t, f, p in zip(times, forward, phi)]
    write_matrix_csv(os.path.join(outdir, "phi.csv"), headers=["t", "forward", "phi"], rows=rows)


def export_tree_fit(outdir: str, times: np.ndarray, df_market: np.ndarray, df_tree: np.ndarray) -> None:
    """tree_fit.csv: k, t_k, DF market, DF lattice, difference"""
    rows = [
        [k, f"{t:.12g}", f"{m:.12g}", f"{q:.12g}", f"{q - m:.3e}"]
        for k, (t, m, q) in enumerate(zip(times, df_market, df_tree))
    ]
    write_matrix_csv(
        os.path.join(outdir, "tree_fit.csv"),
        headers=["k", "t", "DF_market", "DF_tree", "diff"],
        rows=rows,
    )


def export_bond_options(outdir: str, options: List[Dict[str, Any]]) -> None:
    """bond_options.csv: one row per option with analytic and lattice prices."""
    rows = [
        [o["type"], f"{o['strike']:.12g}", f"{o['maturity']:.12g}", f"{o['bond_maturity']:.12g}",
         f"{o['analytic']:.12g}", f"{o['tree']:.12g}"]
        for o in options
    ]
    write_matrix_csv(
        os.path.join(outdir, "bond_options.csv"),
        headers=["type", "strike", "maturity", "bond_maturity", "analytic", "tree"],
        rows=rows,
    )


def export_everything(outdir: str, results: Dict[str, Any]) -> None:
    """
    Convenience: write the time grid, phi, tree fit and option tables, plus meta.json.
    """
    _ensure_dir(outdir)
    write_vector_csv(os.path.join(outdir, "time_grid.csv"), "t", results["times"])
    export_phi_table(outdir, results["times"], results["forward"], results["phi"])
    export_tree_fit(outdir, results["times"], results["df_market"], results["df_tree"])
    export_bond_options(outdir, results["options"])
    write_meta_json(os.path.join(outdir, "meta.json"), results["meta"])
