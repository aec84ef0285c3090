"""
Plot helpers (PNG) for the fitting parameter and the lattice fit.

Each function saves ONE figure per call and closes it (no memory leak).
"""

from __future__ import annotations
import os
import numpy as np
import matplotlib.pyplot as plt


def _ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def save_phi_plot(times: np.ndarray, forward: np.ndarray, phi: np.ndarray, outpath: str,
                  title: str = "Fitting parameter phi(t)"):
    _ensure_dir(os.path.dirname(outpath))
    plt.figure(figsize=(8, 4.5))
    plt.plot(times, forward, label="f(0,t)")
    plt.plot(times, phi, label="phi(t)")
    plt.xlabel("Time (years)")
    plt.ylabel("Rate")
    plt.title(title)
    plt.legend()
    plt.tight_layout()
    plt.savefig(outpath, dpi=150)
    plt.close()


def save_tree_fit_plot(times: np.ndarray, df_market: np.ndarray, df_tree: np.ndarray, outpath: str,
                       title: str = "Lattice vs market discount factors"):
    _ensure_dir(os.path.dirname(outpath))
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(8, 6), sharex=True)
    ax1.plot(times, df_market, label="market")
    ax1.plot(times, df_tree, "--", label="lattice")
    ax1.set_ylabel("DF(0,t)")
    ax1.legend()
    ax2.plot(times, df_tree - df_market)
    ax2.set_xlabel("Time (years)")
    ax2.set_ylabel("lattice - market")
    fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(outpath, dpi=150)
    plt.close(fig)
